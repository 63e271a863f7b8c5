"""
MQM CI Bridge — MQM authentication helpers.

MQM authenticates once per session: a JSON sign-in sets the LWSSO session
cookie, and mutating calls must echo the CSRF cookie back as a header.
"""

from dataclasses import dataclass

HEADER_CLIENT_TYPE = "HPECLIENTTYPE"
HEADER_CSRF = "HPSSO-HEADER-CSRF"
COOKIE_CSRF = "HPSSO_COOKIE_CSRF"


@dataclass(frozen=True)
class MqmCredentials:
    username: str
    password: str

    def as_sign_in_payload(self) -> dict[str, str]:
        """Return the JSON body expected by ``authentication/sign_in``."""
        return {
            "user": self.username,
            "password": self.password,
        }


def client_headers(client_type: str) -> dict[str, str]:
    """Headers sent with every MQM request."""
    return {
        HEADER_CLIENT_TYPE: client_type,
        "Accept": "application/json",
    }
