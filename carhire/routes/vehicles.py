"""Fleet routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from carhire.deps import get_vehicle_service
from carhire.domain.models import Envelope, StatusRequest, Vehicle, VehicleIn
from carhire.services.vehicles import VehicleService

router = APIRouter()


@router.post("", status_code=201, response_model=Envelope[Vehicle])
def add_vehicle(
    payload: VehicleIn,
    service: VehicleService = Depends(get_vehicle_service),
) -> Envelope[Vehicle]:
    vehicle = service.add(payload.model_dump())
    return Envelope(message="Vehicle added successfully", data=vehicle)


@router.get("", response_model=Envelope[list[Vehicle]])
def list_vehicles(
    service: VehicleService = Depends(get_vehicle_service),
) -> Envelope[list[Vehicle]]:
    vehicles = service.list_all()
    return Envelope(count=len(vehicles), data=vehicles)


@router.get("/{vehicle_id}", response_model=Envelope[Vehicle])
def get_vehicle(
    vehicle_id: str,
    service: VehicleService = Depends(get_vehicle_service),
) -> Envelope[Vehicle]:
    return Envelope(data=service.get(vehicle_id))


@router.patch("/{vehicle_id}/status", response_model=Envelope[Vehicle])
def update_vehicle_status(
    vehicle_id: str,
    payload: StatusRequest,
    service: VehicleService = Depends(get_vehicle_service),
) -> Envelope[Vehicle]:
    vehicle = service.set_status(vehicle_id, payload.status)
    return Envelope(message="Vehicle status updated successfully", data=vehicle)


@router.put("/{vehicle_id}", response_model=Envelope[Vehicle])
def update_vehicle(
    vehicle_id: str,
    payload: VehicleIn,
    service: VehicleService = Depends(get_vehicle_service),
) -> Envelope[Vehicle]:
    vehicle = service.update(vehicle_id, payload.model_dump(exclude_unset=True))
    return Envelope(message="Vehicle updated successfully", data=vehicle)


@router.delete("/{vehicle_id}", response_model=Envelope[None])
def delete_vehicle(
    vehicle_id: str,
    service: VehicleService = Depends(get_vehicle_service),
) -> Envelope[None]:
    service.delete(vehicle_id)
    return Envelope(message="Vehicle deleted successfully")
