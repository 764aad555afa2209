"""Signing key provider backed by application settings."""

from dataclasses import dataclass

from webinar_access.config import Settings
from webinar_access.services.tokens import SigningKey, SigningKeyProvider


@dataclass
class SettingsSigningKeyProvider(SigningKeyProvider):
    """Serves the conferencing signing key from configuration."""

    settings: Settings

    def get_signing_key(self) -> SigningKey:
        """Return the configured signing key."""
        return SigningKey(
            secret=self.settings.conferencing_signing_key,
            algorithm=self.settings.conferencing_signing_algorithm,
            key_id=self.settings.conferencing_key_id,
        )
