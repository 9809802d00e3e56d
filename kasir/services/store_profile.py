"""
Store profile: cashier name, display settings and logo.
"""
from typing import Any, Dict, Optional

import pydantic
from pydantic.alias_generators import to_camel

from kasir.core.config import Settings, get_settings
from kasir.core.errors import ValidationError
from kasir.schemas.store import StoreProfile
from kasir.services.action_log import ActionLog
from kasir.services.document_store import STORE_PROFILE, DocumentStore


def _stored_keys(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Known settings are stored under their camelCase names; extras as given."""
    return {
        (to_camel(key) if key in StoreProfile.model_fields else key): value
        for key, value in changes.items()
    }


class StoreProfileService:
    def __init__(self, store: DocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.action_log = ActionLog(store, self.settings)

    def get(self) -> StoreProfile:
        return StoreProfile.model_validate(self.store.read(STORE_PROFILE, {}))

    def _merge(self, changes: Dict[str, Any], label: str) -> StoreProfile:
        def _work(store: DocumentStore) -> StoreProfile:
            current = store.read(STORE_PROFILE, {})
            current.update(changes)
            profile = StoreProfile.model_validate(current)
            store.write(STORE_PROFILE, profile.to_document())
            return profile

        return self.store.run(_work, retries=self.settings.COMMIT_RETRIES, label=label)

    def update(self, changes: Dict[str, Any], user: str) -> StoreProfile:
        """Merge the given settings into the profile. The logo is only set by upload."""
        try:
            StoreProfile.model_validate(changes)
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Invalid store settings",
                {"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]},
            )

        fields = _stored_keys(changes)
        fields.pop("logo", None)
        profile = self._merge(fields, "store update")
        self.action_log.append(user, "Store settings updated")
        return profile

    def set_logo(self, logo_ref: str, user: str) -> StoreProfile:
        profile = self._merge({"logo": logo_ref}, "store logo")
        self.action_log.append(user, "Store logo updated")
        return profile
