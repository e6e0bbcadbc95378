"""
FastAPI REST endpoints for the budget reconciliation service.
Can be run with: uvicorn budget_recon.api:app --reload
"""

from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from budget_recon import __version__
from budget_recon.main import (
    build_estimate_quantity_availability,
    build_project_items_summary,
    require_params,
)
from budget_recon.datasource import ProjectDataSource, SnapshotDataSource
from budget_recon.exceptions import MissingParameterError
from budget_recon.utils.logging import setup_logging
from budget_recon.config import get_config

app = FastAPI(
    title="Budget Reconciliation API",
    description="Budget-vs-commitment reconciliation for construction projects",
    version=__version__,
)

logger = setup_logging(__name__)
config = get_config()


# Data source (singleton), loaded on first use
_data_source: Optional[ProjectDataSource] = None


def get_data_source() -> ProjectDataSource:
    """Get or load the configured data source."""
    global _data_source
    if _data_source is None:
        _data_source = SnapshotDataSource.from_file(config.DATA_SOURCE_PATH)
    return _data_source


def _error_response(error: Exception, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        content={
            "error": str(error),
            "message": message,
        },
        status_code=status_code,
    )


@app.get("/project-items-summary")
async def project_items_summary_endpoint(
    project_uuid: Optional[str] = Query(None),
    corporation_uuid: Optional[str] = Query(None),
    vendor_uuid: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
):
    """
    Budget vs. committed quantity for every budgeted line item of a project.

    Args:
        project_uuid: Project identity (required)
        corporation_uuid: Tenant identity (required)
        vendor_uuid: Restrict commitments to this vendor
        location: Keep only rows whose location matches (case-insensitive)

    Returns:
        JSON {"data": [...]} with one row per budgeted item
    """

    try:
        require_params(project_uuid=project_uuid, corporation_uuid=corporation_uuid)

        output = await build_project_items_summary(
            project_uuid=project_uuid,
            corporation_uuid=corporation_uuid,
            data_source=get_data_source(),
            vendor_uuid=vendor_uuid,
            location=location,
        )

        return JSONResponse(
            content=output.model_dump(mode="json"),
            status_code=200,
        )

    except MissingParameterError as e:
        return _error_response(e, "Invalid request", 400)

    except Exception as e:
        logger.exception(f"project-items-summary failed: {e}")
        return _error_response(e, "Failed to build project items summary", 500)


@app.get("/estimate-quantity-availability")
async def estimate_quantity_availability_endpoint(
    project_uuid: Optional[str] = Query(None),
    estimate_uuid: Optional[str] = Query(None),
    corporation_uuid: Optional[str] = Query(None),
    exclude_po_uuid: Optional[str] = Query(None),
):
    """
    Quantities already ordered per catalog item through estimate-imported POs.

    Returns:
        JSON {"data": {item_uuid: quantity}}
    """

    try:
        require_params(
            project_uuid=project_uuid,
            estimate_uuid=estimate_uuid,
            corporation_uuid=corporation_uuid,
        )

        output = await build_estimate_quantity_availability(
            project_uuid=project_uuid,
            estimate_uuid=estimate_uuid,
            corporation_uuid=corporation_uuid,
            data_source=get_data_source(),
            exclude_po_uuid=exclude_po_uuid,
        )

        return JSONResponse(
            content=output.model_dump(mode="json"),
            status_code=200,
        )

    except MissingParameterError as e:
        return _error_response(e, "Invalid request", 400)

    except Exception as e:
        logger.exception(f"estimate-quantity-availability failed: {e}")
        return _error_response(e, "Failed to compute quantity availability", 500)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/config")
async def get_config_endpoint():
    """Get current configuration (sanitized)."""
    return {
        "reportable_estimate_status": config.REPORTABLE_ESTIMATE_STATUS,
        "qualifying_po_statuses": list(config.QUALIFYING_PO_STATUSES),
        "estimate_import_mode": config.ESTIMATE_IMPORT_MODE,
        "log_level": config.LOG_LEVEL,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        log_level=config.LOG_LEVEL.lower(),
    )
