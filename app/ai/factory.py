from app.ai.config import ProviderCredentials, load_provider_credentials
from app.ai.types import EnhancementProvider

from app.ai.providers.jules_provider import JulesProvider
from app.ai.providers.openai_provider import OpenAIProvider


def build_providers(credentials: ProviderCredentials | None = None) -> list[EnhancementProvider]:
    """Remote providers in precedence order, limited to those with credentials."""
    creds = credentials if credentials is not None else load_provider_credentials()
    providers: list[EnhancementProvider] = []

    for name in creds.configured():
        if name == "jules" and creds.jules is not None:
            providers.append(JulesProvider(creds.jules))
        elif name == "openai" and creds.openai is not None:
            providers.append(OpenAIProvider(creds.openai))

    return providers
