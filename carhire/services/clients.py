"""Client registry: add, edit, suspend and remove renters."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from carhire.domain.errors import NotFoundError, ValidationError, validation_message
from carhire.domain.models import Client, ClientStatus
from carhire.repos.memory import ClientRepository
from carhire.services.normalize import normalize_client_fields

logger = logging.getLogger(__name__)

REQUIRED_CLIENT_FIELDS = ("full_name", "id_or_passport", "phone", "license_number", "citizenship")

_DUPLICATE_LABELS = {
    "id_or_passport": "ID/Passport number",
    "phone": "phone number",
    "license_number": "license number",
}

_ALREADY_EXISTS = {
    "id_or_passport": "ID/Passport already exists",
    "phone": "Phone number already exists",
    "license_number": "License number already exists",
}


class ClientService:
    def __init__(self, client_repo: ClientRepository) -> None:
        self.client_repo = client_repo

    def add(self, payload: dict[str, Any]) -> Client:
        fields = normalize_client_fields(payload)
        missing = [name for name in REQUIRED_CLIENT_FIELDS if not fields.get(name)]
        if missing:
            raise ValidationError(
                "Missing required fields: " + ", ".join(to_camel(name) for name in missing)
            )

        fields.pop("status", None)
        # uniqueness check and insert must not interleave with another write
        with self.client_repo.locked():
            duplicate = self.client_repo.find_duplicate(
                id_or_passport=fields["id_or_passport"],
                phone=fields["phone"],
                license_number=fields["license_number"],
            )
            if duplicate is not None:
                _, field = duplicate
                raise ValidationError(
                    f"Client already exists with this {_DUPLICATE_LABELS[field]}"
                )
            try:
                client = Client(**fields)
            except PydanticValidationError as exc:
                raise ValidationError(validation_message(exc)) from None
            client = self.client_repo.add(client)
        logger.info("client %s added", client.id)
        return client

    def list_all(self) -> list[Client]:
        return self.client_repo.list_all()

    def list_by_status(self, status: str | None) -> list[Client]:
        return self.client_repo.find(status=self._parse_status(status))

    def get(self, client_id: str) -> Client:
        client = self.client_repo.get(client_id)
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def update(self, client_id: str, payload: dict[str, Any]) -> Client:
        """Apply the non-empty fields of *payload*; unique fields must stay unique."""
        self.get(client_id)
        fields = {
            name: value
            for name, value in normalize_client_fields(payload).items()
            if value is not None and value != "" and name != "status"
        }

        with self.client_repo.locked():
            duplicate = self.client_repo.find_duplicate(
                id_or_passport=fields.get("id_or_passport"),
                phone=fields.get("phone"),
                license_number=fields.get("license_number"),
                exclude_id=client_id,
            )
            if duplicate is not None:
                _, field = duplicate
                raise ValidationError(_ALREADY_EXISTS[field])
            return self._write(client_id, fields)

    def set_status(self, client_id: str, status: str | None) -> Client:
        new_status = self._parse_status(status)
        self.get(client_id)
        client = self._write(client_id, {"status": new_status})
        logger.info("client %s status set to %s", client_id, new_status)
        return client

    def delete(self, client_id: str) -> None:
        if not self.client_repo.delete(client_id):
            raise NotFoundError("Client not found")

    def _write(self, client_id: str, fields: dict[str, Any]) -> Client:
        try:
            client = self.client_repo.update(client_id, **fields)
        except PydanticValidationError as exc:
            raise ValidationError(validation_message(exc)) from None
        if client is None:
            raise NotFoundError("Client not found")
        return client

    @staticmethod
    def _parse_status(status: str | None) -> ClientStatus:
        try:
            return ClientStatus(status)
        except ValueError:
            raise ValidationError(
                "Invalid status. Status must be either ACTIVE or SUSPENDED"
            ) from None
