"""Run extraction adapters over stored documents and record the outcome."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.exceptions import NotFoundError
from govflow.core.logging import LogContext
from govflow.models.rfq_document import RfqDocumentStatus
from govflow.repositories.order_repository import OrderRepository
from govflow.repositories.rfq_repository import RfqRepository
from govflow.schemas.extracted_fields import PoExtractedFields, RfqExtractedFields
from govflow.services.extraction.json_parser import parse_ai_json_safe
from govflow.services.workflow.rfq_numbers import normalize_rfq_number
from govflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

# Opaque adapter: document text in, model output out
Extractor = Callable[[str], Awaitable[str]]

MIN_TEXT_LENGTH = 100
MAX_STORED_TEXT = 10000
CONTRACTING_OFFICE_MAX = 255
PO_NUMBER_MAX = 100
PRODUCT_NAME_MAX = 500
UNIT_MAX = 20


def _bounded(value: Optional[str], limit: int) -> Optional[str]:
    return value[:limit] if value else value


@dataclass
class ExtractionOutcome:
    """Result of one extraction attempt."""

    document_id: int
    status: str
    message: Optional[str] = None


class DocumentExtractionService:
    """
    Turn raw document text into structured fields.

    Every attempt leaves the document in a terminal status: ``processed``,
    ``extraction_failed`` for short text or unparsable output, ``failed`` when
    the adapter itself raises. Failures are recorded, never raised.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.rfq_repo = RfqRepository(db)
        self.order_repo = OrderRepository(db)

    async def extract_rfq(self, document_id: int, extractor: Extractor) -> ExtractionOutcome:
        """
        Extract fields for an RFQ document.

        Args:
            document_id: RFQ document id
            extractor: Async adapter returning the model's raw text

        Returns:
            The terminal status and an operator-facing message

        Raises:
            NotFoundError: If the document does not exist
        """
        document = await self.rfq_repo.get_by_id(document_id)
        if document is None:
            raise NotFoundError(f"RFQ document {document_id} not found")

        with LogContext(document_id=document_id, document_type="rfq"):
            document.status = RfqDocumentStatus.PROCESSING.value
            document.processing_error = None
            await self.db.commit()

            text = document.extracted_text or ""
            if len(text.strip()) < MIN_TEXT_LENGTH:
                return await self._finish_rfq(
                    document,
                    RfqDocumentStatus.EXTRACTION_FAILED,
                    "Extraction failed: not enough text in document",
                )

            try:
                raw_output = await extractor(text)
            except Exception as e:
                logger.error("Extraction adapter failed for RFQ %s: %s", document_id, e)
                return await self._finish_rfq(
                    document,
                    RfqDocumentStatus.FAILED,
                    "Extraction failed: extraction service error",
                )

            parsed = parse_ai_json_safe(raw_output)
            if not parsed.success:
                document.extracted_fields = {"error": "Failed to parse fields"}
                return await self._finish_rfq(
                    document,
                    RfqDocumentStatus.EXTRACTION_FAILED,
                    "Extraction failed: could not parse extracted fields",
                )

            fields = RfqExtractedFields.from_raw(parsed.data)
            try:
                document.extracted_fields = parsed.data
                document.extracted_text = text[:MAX_STORED_TEXT]
                document.rfq_number = normalize_rfq_number(fields.rfq_number)
                document.due_date = fields.due_date
                document.contracting_office = _bounded(fields.contracting_office, CONTRACTING_OFFICE_MAX)
                return await self._finish_rfq(document, RfqDocumentStatus.PROCESSED, None)
            except Exception as e:
                logger.error("Saving extracted fields failed for RFQ %s: %s", document_id, e)
                await self.db.rollback()
                await self.db.refresh(document)
                return await self._finish_rfq(
                    document,
                    RfqDocumentStatus.FAILED,
                    "Extraction failed: could not save extracted fields",
                )

    async def _finish_rfq(self, document, status: RfqDocumentStatus, message: Optional[str]) -> ExtractionOutcome:
        document.status = status.value
        document.processing_error = message
        document.updated_at = utc_now()
        await self.db.commit()
        logger.info("RFQ %s extraction finished: %s", document.id, status.value)
        return ExtractionOutcome(document_id=document.id, status=status.value, message=message)

    async def extract_order(self, order_id: int, extractor: Extractor) -> ExtractionOutcome:
        """
        Extract fields for a purchase order.

        Fills PO, product and pricing columns and the normalized RFQ number the
        link repair job uses. The outcome status uses the same vocabulary as RFQ
        extraction.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        with LogContext(order_id=order_id, document_type="po"):
            text = order.extracted_text or ""
            if len(text.strip()) < MIN_TEXT_LENGTH:
                return await self._finish_order(
                    order,
                    RfqDocumentStatus.EXTRACTION_FAILED,
                    "Extraction failed: not enough text in document",
                )

            try:
                raw_output = await extractor(text)
            except Exception as e:
                logger.error("Extraction adapter failed for order %s: %s", order_id, e)
                return await self._finish_order(
                    order,
                    RfqDocumentStatus.FAILED,
                    "Extraction failed: extraction service error",
                )

            parsed = parse_ai_json_safe(raw_output)
            if not parsed.success:
                return await self._finish_order(
                    order,
                    RfqDocumentStatus.EXTRACTION_FAILED,
                    "Extraction failed: could not parse extracted fields",
                )

            fields = PoExtractedFields.from_raw(parsed.data)
            try:
                order.extracted_data = parsed.data
                if fields.po_number and len(fields.po_number) <= PO_NUMBER_MAX:
                    order.po_number = fields.po_number
                order.rfq_number = normalize_rfq_number(fields.rfq_number)
                order.product_name = _bounded(fields.product_name, PRODUCT_NAME_MAX) or order.product_name
                order.nsn = fields.nsn or order.nsn
                order.quantity = fields.quantity if fields.quantity is not None else order.quantity
                order.unit_of_measure = _bounded(fields.unit_of_measure, UNIT_MAX) or order.unit_of_measure
                order.unit_price = fields.unit_price if fields.unit_price is not None else order.unit_price
                order.total_price = fields.total_price if fields.total_price is not None else order.total_price
                order.ship_to_address = fields.ship_to_address or order.ship_to_address
                order.delivery_date = fields.delivery_date or order.delivery_date
                return await self._finish_order(order, RfqDocumentStatus.PROCESSED, None)
            except Exception as e:
                logger.error("Saving extracted fields failed for order %s: %s", order_id, e)
                await self.db.rollback()
                await self.db.refresh(order)
                return await self._finish_order(
                    order,
                    RfqDocumentStatus.FAILED,
                    "Extraction failed: could not save extracted fields",
                )

    async def _finish_order(self, order, status: RfqDocumentStatus, message: Optional[str]) -> ExtractionOutcome:
        order.processing_error = message
        order.updated_at = utc_now()
        await self.db.commit()
        logger.info("Order %s extraction finished: %s", order.id, status.value)
        return ExtractionOutcome(document_id=order.id, status=status.value, message=message)
