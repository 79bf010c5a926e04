"""Changeover matrix endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...data.matrix_repository import load_matrix_entries
from ...schemas.optimization import MatrixEntryModel, MatrixPrefetchRequest, MatrixPrefetchResponse
from ...services.matrix.prefetch import select_matrix_entries

router = APIRouter(prefix="/matrix", tags=["matrix"])


@router.post("/prefetch", response_model=MatrixPrefetchResponse, status_code=status.HTTP_200_OK)
def prefetch(payload: MatrixPrefetchRequest) -> MatrixPrefetchResponse:
    """Stored matrix entries for the given attributes, limited to the listed values."""
    try:
        entries = load_matrix_entries()
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        logging.error(f"Invalid changeover matrix file: {exc}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    selected = select_matrix_entries(entries, payload.attribute_names, payload.values_by_attribute)
    return MatrixPrefetchResponse(
        entries=[
            MatrixEntryModel(
                attribute=entry.attribute,
                from_value=entry.from_value,
                to_value=entry.to_value,
                minutes=entry.minutes,
                source=entry.source,
                notes=entry.notes,
            )
            for entry in selected
        ]
    )
