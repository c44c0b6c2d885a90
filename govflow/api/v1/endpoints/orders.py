"""Order endpoints: order-to-RFQ link repair and fulfillment progress."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.api.v1.schemas.orders import (
    LabelRequest,
    LinkReportResponse,
    OrderDetailResponse,
    OrderUpdateRequest,
    QualitySheetRequest,
    UnlinkedOrdersResponse,
)
from govflow.core.exceptions import NotFoundError
from govflow.db.session import get_async_db
from govflow.schemas.workflow import LabelSummary, OrderSummary, QualitySheetSummary
from govflow.services.fulfillment_service import OrderFulfillmentService
from govflow.services.workflow.linking import OrderLinkingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get(
    "/link-rfqs",
    response_model=UnlinkedOrdersResponse,
    summary="Count unlinked orders",
    description="Orders carrying an RFQ number that are not yet linked to an RFQ",
)
async def get_unlinked_orders(db: AsyncSession = Depends(get_async_db)) -> UnlinkedOrdersResponse:
    """Preview the link repair job."""
    try:
        orders = await OrderLinkingService(db).find_unlinked()
        return UnlinkedOrdersResponse(
            unlinked=len(orders),
            po_numbers=[order.po_number for order in orders],
        )
    except Exception:
        logger.exception("Failed to count unlinked orders")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load unlinked orders",
        )


@router.post(
    "/link-rfqs",
    response_model=LinkReportResponse,
    summary="Link orders to RFQs",
    description="Resolve unlinked orders to RFQ documents by RFQ number",
)
async def link_orders_to_rfqs(
    dry_run: bool = Query(default=False, alias="dryRun", description="Report without writing"),
    db: AsyncSession = Depends(get_async_db),
) -> LinkReportResponse:
    """
    Run the link repair job.

    Safe to run repeatedly: orders already linked are skipped. Failures on a
    single order are reported in ``errors`` and do not stop the run.
    """
    try:
        report = await OrderLinkingService(db).link_unlinked_orders(dry_run=dry_run)
        return LinkReportResponse.model_validate(report)
    except Exception:
        logger.exception("Link repair job failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to link orders to RFQs",
        )


@router.get(
    "/{order_id}",
    response_model=OrderDetailResponse,
    summary="Get order",
    description="An order with its quality sheet and labels",
    responses={404: {"description": "Order not found"}},
)
async def get_order(order_id: int, db: AsyncSession = Depends(get_async_db)) -> OrderDetailResponse:
    try:
        detail = await OrderFulfillmentService(db).get_order(order_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except Exception:
        logger.exception("Failed to fetch order %s", order_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch order",
        )
    return OrderDetailResponse.model_validate(detail)


@router.patch(
    "/{order_id}",
    response_model=OrderSummary,
    summary="Update order",
    description="Move an order to another fulfillment stage or record its tracking number",
    responses={404: {"description": "Order not found"}, 422: {"description": "Validation error"}},
)
async def update_order(
    order_id: int,
    update: OrderUpdateRequest,
    db: AsyncSession = Depends(get_async_db),
) -> OrderSummary:
    try:
        order = await OrderFulfillmentService(db).update_order(
            order_id,
            stage=update.stage,
            tracking_number=update.tracking_number,
        )
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except Exception:
        logger.exception("Failed to update order %s", order_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update order",
        )
    return OrderSummary.model_validate(order)


@router.post(
    "/{order_id}/quality-sheet",
    response_model=QualitySheetSummary,
    summary="Save quality sheet",
    description="Create or update the order's quality sheet; an inspector signature marks it verified",
    responses={404: {"description": "Order not found"}},
)
async def save_quality_sheet(
    order_id: int,
    request: QualitySheetRequest,
    db: AsyncSession = Depends(get_async_db),
) -> QualitySheetSummary:
    try:
        sheet = await OrderFulfillmentService(db).save_quality_sheet(
            order_id, request.model_dump(exclude_unset=True)
        )
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except Exception:
        logger.exception("Failed to save quality sheet for order %s", order_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save quality sheet",
        )
    return QualitySheetSummary.model_validate(sheet)


@router.get(
    "/{order_id}/labels",
    response_model=list[LabelSummary],
    summary="List labels",
    responses={404: {"description": "Order not found"}},
)
async def list_labels(order_id: int, db: AsyncSession = Depends(get_async_db)) -> list[LabelSummary]:
    try:
        detail = await OrderFulfillmentService(db).get_order(order_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except Exception:
        logger.exception("Failed to fetch labels for order %s", order_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch labels",
        )
    return [LabelSummary.model_validate(label) for label in detail.labels]


@router.post(
    "/{order_id}/labels",
    response_model=LabelSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Record label",
    description="Record a label generated for the order",
    responses={404: {"description": "Order not found"}},
)
async def add_label(
    order_id: int,
    request: LabelRequest,
    db: AsyncSession = Depends(get_async_db),
) -> LabelSummary:
    try:
        label = await OrderFulfillmentService(db).add_label(order_id, **request.model_dump())
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except Exception:
        logger.exception("Failed to record label for order %s", order_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record label",
        )
    return LabelSummary.model_validate(label)
