"""
Bulk auction upload from a spreadsheet.

The gallery dashboard accepts a CSV or Excel sheet with one artwork per row
and creates a timed auction for each of them in one request.
"""
import csv
import io
import time
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import openpyxl
from pydantic import BaseModel, ConfigDict, Field

from artdesk.errors import ArtdeskError, ValidationError
from artdesk.services.crud import failure_message
from artdesk.services.notifications import Notifier
from artdesk.utils.http import BackendClient
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)

BULK_CREATE_PATH = "/auction/bulkCreate"
DETAIL_COLUMNS = (("Details", "Description"), ("Type", "Type"), ("Medium", "Medium"), ("Dimensions", "Dimensions"))


class AuctionDetail(BaseModel):
    key: str
    value: str


class AuctionProduct(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    price: float = 0
    estimateprice: str = "N/A"
    offer_amount: float = Field(0, alias="offerAmount")
    online_price: float = Field(0, alias="onlinePrice")
    sell_price: float = Field(0, alias="sellPrice")
    reserve_price: float = Field(0, alias="ReservePrice")
    sku_number: str = Field("N/A", alias="skuNumber")
    lot_number: str = Field("", alias="lotNumber")
    internal_id: str = Field(alias="internalID")
    type: str = ""
    auction_type: str = Field("TIMED", alias="auctionType")
    image: List[str] = []
    details: List[AuctionDetail] = []
    stock: int = 1
    count: int = 1
    sort_by_price: str = Field("Low Price", alias="sortByPrice")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _float(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(_cell(value) or 0)
    except ValueError:
        return 0.0


def _int(value: Any, default: int) -> int:
    text = _cell(value)
    if not text:
        return default
    try:
        return int(float(text))
    except ValueError:
        return 0


def product_from_row(row: Dict[str, Any], index: int, batch: int = None) -> Optional[AuctionProduct]:
    """Map one sheet row to a product, or None when it lacks a title or artist."""
    if not _cell(row.get("Product Title")) or not _cell(row.get("Artist")):
        return None

    batch = batch if batch is not None else int(time.time() * 1000)
    details = [
        AuctionDetail(key=key, value=_cell(row.get(column)))
        for column, key in DETAIL_COLUMNS
        if _cell(row.get(column))
    ]
    image_url = _cell(row.get("Image URL"))

    return AuctionProduct(
        title=_cell(row.get("Product Title")),
        description=_cell(row.get("Description")),
        price=_float(row.get("Price")),
        estimateprice=_cell(row.get("Estimate Price")) or "N/A",
        offer_amount=_float(row.get("Offer Amount")),
        online_price=_float(row.get("Online Price")),
        sell_price=_float(row.get("Starting Bid")),
        reserve_price=_float(row.get("Reserve Price")),
        sku_number=_cell(row.get("SKU")) or "N/A",
        lot_number=_cell(row.get("Lot Number")),
        internal_id=_cell(row.get("Internal ID")) or f"AUCTION_{batch}_{index}",
        type=_cell(row.get("Type")),
        auction_type=_cell(row.get("Auction Type")) or "TIMED",
        image=[image_url] if image_url else [],
        details=details,
        stock=_int(row.get("Stock"), 1),
        sort_by_price=_cell(row.get("Sort By Price")) or "Low Price",
    )


def products_from_rows(rows: Iterable[Sequence[Any]]) -> List[AuctionProduct]:
    rows = list(rows)
    if len(rows) < 2:
        raise ArtdeskError("File must have at least a header row and one data row")

    headers = [_cell(h).replace('"', "") for h in rows[0]]
    batch = int(time.time() * 1000)
    products = []
    for index, row in enumerate(rows[1:], start=1):
        if not any(_cell(value) for value in row):
            continue
        record = {header: row[i] if i < len(row) else "" for i, header in enumerate(headers)}
        product = product_from_row(record, index, batch)
        if product is not None:
            products.append(product)
    logger.info("Parsed %d products from %d data rows", len(products), len(rows) - 1)
    return products


def parse_csv(text: str) -> List[AuctionProduct]:
    return products_from_rows(csv.reader(io.StringIO(text.lstrip("\ufeff"))))


def parse_workbook(source: Union[str, Path, bytes]) -> List[AuctionProduct]:
    """Read the first worksheet of an .xlsx file (path or raw bytes)."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        return products_from_rows(ws.iter_rows(values_only=True))
    finally:
        wb.close()


def parse_file(filename: str, data: bytes) -> List[AuctionProduct]:
    suffix = Path(filename).suffix.lower()
    if suffix == ".csv":
        return parse_csv(data.decode("utf-8"))
    if suffix in (".xlsx", ".xlsm"):
        return parse_workbook(data)
    raise ArtdeskError("Please select a valid Excel or CSV file")


def _iso(value: Union[str, date, datetime]) -> str:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def build_auction_payload(products: Sequence[AuctionProduct], category: str,
                          start_date: Union[str, date, datetime], end_date: Union[str, date, datetime],
                          description: str = "") -> Dict[str, Any]:
    missing = [
        name for name, value in (("category", category), ("startDate", start_date), ("endDate", end_date))
        if value in (None, "")
    ]
    if missing:
        raise ValidationError(missing)
    if not products:
        raise ValidationError([], ["No valid products found in the file"])

    return {
        "products": [p.model_dump(mode="json", by_alias=True) for p in products],
        "category": category,
        "stateDate": _iso(start_date),
        "endDate": _iso(end_date),
        "desciptions": description,
        "auctionType": "TIMED",
        "status": "ACTIVE",
    }


def upload_auctions(client: BackendClient, products: Sequence[AuctionProduct], category: str,
                    start_date, end_date, description: str = "", notifier: Notifier = None) -> bool:
    notifier = notifier or Notifier()
    try:
        payload = build_auction_payload(products, category, start_date, end_date, description)
    except ValidationError as e:
        notifier.error(e.message)
        return False

    try:
        client.post(BULK_CREATE_PATH, json=payload)
    except ArtdeskError as e:
        logger.error("Bulk auction upload failed: %s", e)
        notifier.error(failure_message(e, "Failed to upload auctions"))
        return False

    notifier.success(f"Successfully created {len(products)} auctions")
    return True
