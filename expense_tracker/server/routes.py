"""API routes for the expense collection."""

from typing import Annotated, Any, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from expense_tracker.models.expense import ExpenseDraft, RemoteRecord


router = APIRouter()
logger = structlog.get_logger(__name__)


def get_expenses_collection(request: Request) -> AsyncIOMotorCollection:
    """Dependency to get the MongoDB expenses collection from the request state."""
    collection = getattr(request.state, "expenses_collection", None)
    if collection is None:
        logger.error("expenses_collection_missing")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not available.",
        )
    return collection


ExpensesCollectionDep = Annotated[AsyncIOMotorCollection, Depends(get_expenses_collection)]


def _object_id(expense_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(expense_id)
    except (InvalidId, TypeError):
        return None


def _to_document(draft: ExpenseDraft) -> dict[str, Any]:
    # Dates are kept as ISO strings, amounts as numbers
    return draft.to_payload()


def _to_record(document: dict[str, Any]) -> RemoteRecord:
    return RemoteRecord.model_validate({**document, "_id": str(document["_id"])})


def _database_error(action: str, error: PyMongoError) -> HTTPException:
    logger.error("database_error", action=action, error=str(error))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Database error while trying to {action}.",
    )


@router.get(
    "/expenses",
    response_model=list[RemoteRecord],
    summary="List expenses",
)
async def list_expenses(collection: ExpensesCollectionDep) -> list[RemoteRecord]:
    """Every stored expense, in natural order."""
    try:
        documents = await collection.find().to_list(length=None)
    except PyMongoError as e:
        raise _database_error("list expenses", e)

    records = []
    for document in documents:
        try:
            records.append(_to_record(document))
        except ValueError as e:
            logger.warning(
                "document_skipped",
                document_id=str(document.get("_id")),
                error=str(e),
            )
    logger.info("expenses_listed", count=len(records))
    return records


@router.post(
    "/expenses",
    response_model=RemoteRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create expense",
)
async def create_expense(
    draft: ExpenseDraft,
    collection: ExpensesCollectionDep,
) -> RemoteRecord:
    document = _to_document(draft)
    try:
        result = await collection.insert_one(document)
    except PyMongoError as e:
        raise _database_error("create expense", e)

    document["_id"] = result.inserted_id
    logger.info("expense_inserted", expense_id=str(result.inserted_id))
    return _to_record(document)


@router.put(
    "/expenses/{expense_id}",
    response_model=RemoteRecord,
    summary="Update expense",
)
async def update_expense(
    expense_id: str,
    draft: ExpenseDraft,
    collection: ExpensesCollectionDep,
) -> RemoteRecord:
    oid = _object_id(expense_id)
    if oid is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found.")

    try:
        document = await collection.find_one_and_update(
            {"_id": oid},
            {"$set": _to_document(draft)},
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError as e:
        raise _database_error("update expense", e)

    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found.")

    logger.info("expense_replaced", expense_id=expense_id)
    return _to_record(document)


@router.delete("/expenses/{expense_id}", summary="Delete expense")
async def delete_expense(
    expense_id: str,
    collection: ExpensesCollectionDep,
) -> dict[str, int]:
    """Idempotent: unknown or malformed ids delete nothing."""
    oid = _object_id(expense_id)
    if oid is None:
        return {"deleted": 0}

    try:
        result = await collection.delete_one({"_id": oid})
    except PyMongoError as e:
        raise _database_error("delete expense", e)

    logger.info("expense_removed", expense_id=expense_id, deleted=result.deleted_count)
    return {"deleted": result.deleted_count}
