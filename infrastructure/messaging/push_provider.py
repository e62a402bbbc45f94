import logging
from typing import Optional

from infrastructure.http.backend_client import BackendClient
from use_cases.auth_errors import AuthFlowError
from use_cases.session_models import Platform

log = logging.getLogger(__name__)

FCM_TOKEN_PATH = "timeline/pushNotif/fcmToken"


class PushTokenProvider:
    def __init__(self, client: BackendClient, device_token: Optional[str] = None):
        self.client = client
        self.device_token = device_token
        self.last_registered_token: Optional[str] = None

    def register(self, platform: Platform) -> tuple[bool, str]:
        """
        Registers the device push token on the platform timeline.
        Returns a tuple of (success_boolean, status_message).
        """
        if not self.device_token:
            return False, "No device token configured."
        try:
            self.client.fetch_json(platform, FCM_TOKEN_PATH, method="PUT", params={"fcmToken": self.device_token})
            self.last_registered_token = self.device_token
            return True, "Device token registered."
        except AuthFlowError as e:
            log.warning(f"Device token registration failed on {platform.name}: {e.message}")
            return False, f"Registration error: {e.message}"

    def unregister(self, platform: Platform) -> tuple[bool, str]:
        token = self.last_registered_token or self.device_token
        if not token:
            return False, "No device token configured."
        try:
            self.client.fetch_json(platform, FCM_TOKEN_PATH, method="DELETE", params={"fcmToken": token})
            self.last_registered_token = None
            return True, "Device token unregistered."
        except AuthFlowError as e:
            log.warning(f"Device token removal failed on {platform.name}: {e.message}")
            return False, f"Unregistration error: {e.message}"
