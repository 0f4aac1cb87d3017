from fastapi import Request

from tableside.config import settings
from tableside.exceptions import NotFound
from tableside.services.order_service import OrderPlacementEngine


def request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def get_placement_engine(request: Request) -> OrderPlacementEngine:
    return request.app.state.placement_engine


def check_table(table_id: int) -> int:
    if not 1 <= table_id <= settings.table_count:
        raise NotFound(f"Table {table_id} does not exist")
    return table_id
