from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status

from hojaverde.core.exceptions import DuplicateRecordError
from hojaverde.models.user import User
from hojaverde.schemas.producer import (
    Producer as ProducerSchema,
    ProducerCreate,
    ProducerUpdate,
    CertificationUpdate,
)
from hojaverde.storage.database import DatabaseStorage, get_storage
from hojaverde.auth.security import get_current_active_user, is_validator

router = APIRouter()


def _get_or_404(storage: DatabaseStorage, producer_id: int):
    producer = storage.get_producer(producer_id)
    if producer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Producer not found")
    return producer


@router.post(
    "/",
    response_model=ProducerSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Register as a producer",
)
def create_producer(
    producer: ProducerCreate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    """
    Register the current user's farm. New producers start with
    certification status **pending** until a validator reviews them.
    """
    try:
        return storage.create_producer(current_user.id, producer.model_dump())
    except DuplicateRecordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[ProducerSchema], summary="List producers, newest first")
def read_producers(
    limit: int = Query(50, ge=1, le=100),
    storage: DatabaseStorage = Depends(get_storage),
):
    return storage.get_producers(limit=limit)


@router.get("/user/{user_id}", response_model=ProducerSchema)
def read_producer_by_user(user_id: int, storage: DatabaseStorage = Depends(get_storage)):
    producer = storage.get_producer_by_user_id(user_id)
    if producer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Producer not found")
    return producer


@router.get("/{producer_id}", response_model=ProducerSchema)
def read_producer(producer_id: int, storage: DatabaseStorage = Depends(get_storage)):
    return _get_or_404(storage, producer_id)


@router.put("/{producer_id}", response_model=ProducerSchema, summary="Update own farm profile")
def update_producer(
    producer_id: int,
    producer: ProducerUpdate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    db_producer = _get_or_404(storage, producer_id)
    if db_producer.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")

    return storage.update_producer(producer_id, producer.model_dump(exclude_unset=True))


@router.patch(
    "/{producer_id}/certification",
    response_model=ProducerSchema,
    summary="Set certification status",
    description="Set a producer's certification status. Requires validator privileges.",
)
def update_producer_certification(
    producer_id: int,
    certification: CertificationUpdate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(is_validator),
):
    producer = storage.update_producer_certification(producer_id, certification.status)
    if producer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Producer not found")
    return producer
