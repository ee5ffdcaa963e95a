import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from encoding_checker.core.cqrs.command_bus import CommandBus
from encoding_checker.core.cqrs.query_bus import QueryBus
from encoding_checker.core.exceptions import (
    EmptyAcceptedSetError,
    InvalidDirectoryError,
    ScanAlreadyRunningError,
    UnknownCharsetError,
)
from encoding_checker.dependencies import get_command_bus, get_query_bus
from encoding_checker.domains.scanning.commands import CancelScanCommand, StartScanCommand
from encoding_checker.domains.scanning.mask_matcher import parse_mask_text
from encoding_checker.domains.scanning.queries import (
    GetKnownCharsetsQuery,
    GetScanResultsQuery,
    GetScanStatusQuery,
)
from encoding_checker.models import FileResult, ScanRequest, ScanRunInfo, ScanStartRequest, ScanStatus

scan_router = APIRouter(
    prefix="/api",
    tags=["scanning"],
)


@scan_router.post(
    "/scan/start", response_model=ScanRunInfo, status_code=status.HTTP_202_ACCEPTED
)
async def start_scan(
    body: ScanStartRequest,
    command_bus: CommandBus = Depends(get_command_bus),
) -> ScanRunInfo:
    request = ScanRequest(
        root_directory=body.root_directory.strip(),
        recursive=body.recursive,
        mask_patterns=parse_mask_text(body.file_masks),
        mode=body.mode,
        accepted_charsets=frozenset(c.strip() for c in body.accepted_charsets if c.strip()),
    )

    try:
        run_info = await command_bus.execute(StartScanCommand(request=request))
    except InvalidDirectoryError as e:
        if not request.root_directory:
            raise HTTPException(status_code=400, detail="Please specify a directory to check")
        raise HTTPException(
            status_code=400,
            detail=f"The directory you specified '{e.directory}' does not exist",
        )
    except (EmptyAcceptedSetError, UnknownCharsetError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScanAlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logging.info(f"API: Scan {run_info.run_id[:8]} accepted for {request.root_directory}")
    return run_info


@scan_router.post("/scan/cancel")
async def cancel_scan(command_bus: CommandBus = Depends(get_command_bus)) -> dict:
    cancelled = await command_bus.execute(CancelScanCommand())
    return {"cancelled": cancelled}


@scan_router.get("/scan/status", response_model=ScanStatus)
async def get_scan_status(query_bus: QueryBus = Depends(get_query_bus)) -> ScanStatus:
    return await query_bus.execute(GetScanStatusQuery())


@scan_router.get("/scan/results", response_model=List[FileResult])
async def get_scan_results(query_bus: QueryBus = Depends(get_query_bus)) -> List[FileResult]:
    return await query_bus.execute(GetScanResultsQuery())


@scan_router.get("/charsets")
async def get_known_charsets(query_bus: QueryBus = Depends(get_query_bus)) -> List[str]:
    try:
        return await query_bus.execute(GetKnownCharsetsQuery())
    except Exception as e:
        logging.error(f"API: Error getting known charsets: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get charsets: {str(e)}")
