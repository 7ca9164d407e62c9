"""Client registry routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from carhire.deps import get_client_service
from carhire.domain.models import Client, ClientIn, Envelope, StatusRequest
from carhire.services.clients import ClientService

router = APIRouter()


@router.post("", status_code=201, response_model=Envelope[Client])
def add_client(
    payload: ClientIn,
    service: ClientService = Depends(get_client_service),
) -> Envelope[Client]:
    client = service.add(payload.model_dump())
    return Envelope(message="Client added successfully", data=client)


@router.get("", response_model=Envelope[list[Client]])
def list_clients(service: ClientService = Depends(get_client_service)) -> Envelope[list[Client]]:
    clients = service.list_all()
    return Envelope(count=len(clients), data=clients)


@router.get("/filter", response_model=Envelope[list[Client]])
def filter_clients(
    status: str | None = None,
    service: ClientService = Depends(get_client_service),
) -> Envelope[list[Client]]:
    """Clients with the given status (ACTIVE or SUSPENDED)."""
    clients = service.list_by_status(status)
    return Envelope(count=len(clients), data=clients)


@router.get("/{client_id}", response_model=Envelope[Client])
def get_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
) -> Envelope[Client]:
    return Envelope(data=service.get(client_id))


@router.put("/{client_id}", response_model=Envelope[Client])
def update_client(
    client_id: str,
    payload: ClientIn,
    service: ClientService = Depends(get_client_service),
) -> Envelope[Client]:
    client = service.update(client_id, payload.model_dump(exclude_unset=True))
    return Envelope(message="Client updated successfully", data=client)


@router.put("/{client_id}/status", response_model=Envelope[Client])
def update_client_status(
    client_id: str,
    payload: StatusRequest,
    service: ClientService = Depends(get_client_service),
) -> Envelope[Client]:
    client = service.set_status(client_id, payload.status)
    return Envelope(message=f"Client status updated to {client.status} successfully", data=client)


@router.delete("/{client_id}", response_model=Envelope[None])
def delete_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
) -> Envelope[None]:
    service.delete(client_id)
    return Envelope(message="Client deleted successfully")
