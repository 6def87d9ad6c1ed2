from careslot.clients.api_client import ApiClient
from careslot.clients.booking_api import BookingApiClient
from careslot.clients.interaction_api import InteractionApiClient
from careslot.clients.provider_directory import ProviderDirectoryClient

__all__ = ["ApiClient", "BookingApiClient", "InteractionApiClient", "ProviderDirectoryClient"]
