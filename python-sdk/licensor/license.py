from __future__ import annotations

import os
import platform
import socket
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .errors import ErrorKind, LicenseError, LicenseNotSignedError, NotFoundError
from .types import Dataset, Document
from .validation import error_for_validation_code
from .verify import verify_license_file, verify_license_key

if TYPE_CHECKING:
    from .client import LicensorClient

LIST_LIMIT = 100


def _timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _relationship_id(resource: Document, name: str) -> str | None:
    rel = (resource.get("relationships") or {}).get(name) or {}
    data = rel.get("data") if isinstance(rel, dict) else None
    return data.get("id") if isinstance(data, dict) else None


@dataclass
class ValidationResult:
    valid: bool
    code: str
    detail: str = ""

    @classmethod
    def from_meta(cls, meta: dict[str, Any]) -> ValidationResult:
        return cls(
            valid=bool(meta.get("valid")),
            code=str(meta.get("code") or ""),
            detail=str(meta.get("detail") or ""),
        )


@dataclass
class Entitlement:
    id: str
    name: str = ""
    code: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    created: datetime | None = None

    @classmethod
    def from_resource(cls, resource: Document) -> Entitlement:
        attrs = resource["attributes"]
        return cls(
            id=resource["id"],
            name=attrs.get("name") or "",
            code=attrs.get("code") or "",
            metadata=attrs.get("metadata") or {},
            created=_timestamp(attrs.get("created")),
        )


@dataclass
class Machine:
    fingerprint: str
    id: str = ""
    name: str = ""
    hostname: str = ""
    platform: str = ""
    cores: int = 0
    require_heartbeat: bool = False
    heartbeat_status: str = ""
    license_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created: datetime | None = None

    @classmethod
    def from_resource(cls, resource: Document) -> Machine:
        attrs = resource["attributes"]
        return cls(
            id=resource["id"],
            fingerprint=attrs["fingerprint"],
            name=attrs.get("name") or "",
            hostname=attrs.get("hostname") or "",
            platform=attrs.get("platform") or "",
            cores=int(attrs.get("cores") or 0),
            require_heartbeat=bool(attrs.get("requireHeartbeat")),
            heartbeat_status=attrs.get("heartbeatStatus") or "",
            license_id=_relationship_id(resource, "license"),
            metadata=attrs.get("metadata") or {},
            created=_timestamp(attrs.get("created")),
        )

    def to_document(self) -> Document:
        return {
            "data": {
                "type": "machines",
                "attributes": {
                    "fingerprint": self.fingerprint,
                    "hostname": self.hostname,
                    "platform": self.platform,
                    "cores": self.cores,
                },
                "relationships": {
                    "license": {"data": {"type": "licenses", "id": self.license_id}},
                },
            }
        }


@dataclass
class LicenseFile:
    id: str
    certificate: str
    issued: datetime | None = None
    expiry: datetime | None = None
    ttl: int | None = None

    @classmethod
    def from_resource(cls, resource: Document) -> LicenseFile:
        attrs = resource["attributes"]
        return cls(
            id=resource["id"],
            certificate=attrs["certificate"],
            issued=_timestamp(attrs.get("issued")),
            expiry=_timestamp(attrs.get("expiry")),
            ttl=attrs.get("ttl"),
        )

    def verify(self, public_key: bytes | str | None, license_key: str | None = None) -> Dataset:
        """Verify the certificate and return its (decrypted) contents."""
        return verify_license_file(self.certificate, public_key, license_key)


@dataclass
class License:
    id: str
    key: str = ""
    name: str = ""
    scheme: str = ""
    expiry: datetime | None = None
    require_heartbeat: bool = False
    last_validated: datetime | None = None
    created: datetime | None = None
    updated: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    policy_id: str | None = None
    last_validation: ValidationResult | None = None

    @classmethod
    def from_resource(cls, resource: Document) -> License:
        attrs = resource["attributes"]
        return cls(
            id=resource["id"],
            key=attrs.get("key") or "",
            name=attrs.get("name") or "",
            scheme=attrs.get("scheme") or "",
            expiry=_timestamp(attrs.get("expiry")),
            require_heartbeat=bool(attrs.get("requireHeartbeat")),
            last_validated=_timestamp(attrs.get("lastValidated")),
            created=_timestamp(attrs.get("created")),
            updated=_timestamp(attrs.get("updated")),
            metadata=attrs.get("metadata") or {},
            policy_id=_relationship_id(resource, "policy"),
        )

    def validate(self, client: LicensorClient, *fingerprints: str) -> ValidationResult:
        """Validate the license, scoped to any given fingerprints.

        Raises ``LicenseError`` whose ``kind`` names the reason when the
        license is not valid, e.g. ``NOT_ACTIVATED`` or ``EXPIRED``.
        """
        params = {"meta": {"scope": {"fingerprints": list(fingerprints)}}} if fingerprints else {"meta": {}}
        try:
            response = client.post(f"licenses/{self.id}/actions/validate", params, model=License.from_resource)
        except NotFoundError as err:
            raise LicenseError(ErrorKind.LICENSE_INVALID, str(err), problem=err.problem, response=err.response) from err

        document = response.document or {}
        if isinstance(response.data, License):
            self.__dict__.update(response.data.__dict__)

        result = ValidationResult.from_meta(document.get("meta") or {})
        self.last_validation = result

        error = error_for_validation_code(result.code, result.detail or None)
        if error is not None:
            error.response = response
            error.status_code = response.status
            raise error
        return result

    def verify(self, public_key: bytes | str | None) -> Dataset:
        """Check the key is genuine and return the dataset embedded in it."""
        if not self.scheme:
            raise LicenseNotSignedError("license key is not signed")
        return verify_license_key(self.key, public_key, self.scheme)

    def activate(self, client: LicensorClient, fingerprint: str) -> Machine:
        machine = Machine(
            fingerprint=fingerprint,
            hostname=socket.gethostname(),
            platform=f"{platform.system().lower()}/{platform.machine().lower()}",
            cores=os.cpu_count() or 0,
            license_id=self.id,
        )
        return client.post("machines", machine, model=Machine.from_resource).data

    def deactivate(self, client: LicensorClient, machine_id: str) -> None:
        """Deactivate a machine by its ID or fingerprint."""
        client.delete(f"machines/{machine_id}")

    def machine(self, client: LicensorClient, machine_id: str) -> Machine:
        return client.get(f"machines/{machine_id}", model=Machine.from_resource).data

    def machines(self, client: LicensorClient) -> list[Machine]:
        response = client.get(f"licenses/{self.id}/machines", {"limit": LIST_LIMIT}, model=Machine.from_resource)
        return response.data or []

    def entitlements(self, client: LicensorClient) -> list[Entitlement]:
        response = client.get(f"licenses/{self.id}/entitlements", {"limit": LIST_LIMIT}, model=Entitlement.from_resource)
        return response.data or []

    def checkout(
        self,
        client: LicensorClient,
        *,
        encrypt: bool = True,
        include: str = "entitlements",
        ttl: int | None = None,
    ) -> LicenseFile:
        """Check out a signed (and by default encrypted) license file."""
        query: dict[str, Any] = {"encrypt": "true" if encrypt else "false", "include": include}
        if ttl is not None:
            query["ttl"] = ttl
        return client.post(f"licenses/{self.id}/actions/check-out", query=query, model=LicenseFile.from_resource).data
