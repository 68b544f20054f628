"""Document events: upload, analysis outcome and status notifications."""

from __future__ import annotations

import logging

from app.domain.entities.notification import PRIORITY_HIGH, PRIORITY_NORMAL
from app.domain.topics import (
    CARE_PLAN_GENERATION_REQUESTED,
    DOCUMENT_ANALYZED,
    DOCUMENT_STATUS_CHANGED,
    DOCUMENT_UPLOADED,
)

from .context import EventHandlerContext, TopicHandler, build_request
from .schemas import (
    DocumentAnalyzedEvent,
    DocumentStatusChangedEvent,
    DocumentUploadedEvent,
)

logger = logging.getLogger(__name__)

DOCUMENT_TYPE_MEDICAL_RECORD = "medical_record"
DOCUMENT_STATUS_AVAILABLE = "available"
DOCUMENT_STATUS_ERROR = "error"


async def handle_document_uploaded(
    context: EventHandlerContext, event: DocumentUploadedEvent
) -> None:
    await context.notify(
        build_request(
            event.owner_id,
            "document_uploaded",
            "Document Uploaded",
            f'Your document "{event.document_name}" has been uploaded successfully.',
            data={"documentId": event.document_id},
        )
    )


async def handle_document_analyzed(
    context: EventHandlerContext, event: DocumentAnalyzedEvent
) -> None:
    """Notify the owner of a finished analysis.

    Pending and processing updates are ignored. A completed medical record
    analysis also requests a care plan draft for the owner.
    """

    if event.status == "completed":
        title = "Document Analysis Complete"
        message = f'The analysis of your document "{event.document_name}" is complete.'
        priority = PRIORITY_NORMAL
    elif event.status == "failed":
        title = "Document Analysis Failed"
        message = (
            f'The analysis of your document "{event.document_name}" failed. '
            "Please try again or contact support."
        )
        priority = PRIORITY_HIGH
    else:
        logger.debug(
            "Analysis %s of document %s is %s",
            event.analysis_id,
            event.document_id,
            event.status,
        )
        return

    await context.notify(
        build_request(
            event.owner_id,
            "document_analyzed",
            title,
            message,
            priority=priority,
            data={"documentId": event.document_id, "analysisId": event.analysis_id},
        )
    )

    if (
        event.status == "completed"
        and event.document_type == DOCUMENT_TYPE_MEDICAL_RECORD
        and context.bus is not None
    ):
        await context.bus.publish(
            CARE_PLAN_GENERATION_REQUESTED,
            {
                "documentId": event.document_id,
                "clientId": event.owner_id,
                "analysisId": event.analysis_id,
            },
        )
        logger.info("Requested care plan generation from document %s", event.document_id)


async def handle_document_status_changed(
    context: EventHandlerContext, event: DocumentStatusChangedEvent
) -> None:
    status = event.new_status.lower()
    priority = None
    if status == DOCUMENT_STATUS_AVAILABLE:
        title = "Document Uploaded Successfully"
        message = f'Your document "{event.document_name}" is now available for use.'
    elif status == DOCUMENT_STATUS_ERROR:
        title = "Document Upload Failed"
        message = (
            f'There was an error processing your document "{event.document_name}". '
            "Please try again or contact support."
        )
        priority = PRIORITY_HIGH
    else:
        title = "Document Status Updated"
        message = (
            f'The status of your document "{event.document_name}" has been updated '
            f"to {event.new_status}."
        )

    await context.notify(
        build_request(
            event.owner_id,
            "document_status_changed",
            title,
            message,
            priority=priority,
            data={
                "documentId": event.document_id,
                "previousStatus": event.previous_status,
                "newStatus": event.new_status,
            },
        )
    )


HANDLERS: dict[str, TopicHandler] = {
    DOCUMENT_UPLOADED: TopicHandler(DocumentUploadedEvent, handle_document_uploaded),
    DOCUMENT_ANALYZED: TopicHandler(DocumentAnalyzedEvent, handle_document_analyzed),
    DOCUMENT_STATUS_CHANGED: TopicHandler(
        DocumentStatusChangedEvent, handle_document_status_changed
    ),
}


__all__ = [
    "HANDLERS",
    "handle_document_analyzed",
    "handle_document_status_changed",
    "handle_document_uploaded",
]
