"""Bulk event import from spreadsheets (admin)."""
import io
import logging
import zipfile
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from injoyplan.core.errors import ErrorCode, InvalidInputError, NotFoundError
from injoyplan.db.models import Event, EventDate, Location, User, UserRole
from injoyplan.schemas.admin import ImportResult

logger = logging.getLogger(__name__)

EXCEL_EPOCH = date(1899, 12, 30)
MAX_REPORTED_ERRORS = 10

Row = Dict[str, Any]


def _records(frame: pd.DataFrame) -> List[Row]:
    """DataFrame rows as dicts with NaN/NaT turned into None."""
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = _text(value)
    if text is None:
        return False
    return text.lower() in ("1", "1.0", "si", "sí", "true", "x")


def parse_sheet_date(value: Any) -> Optional[date]:
    """Parse a spreadsheet date cell: Excel serial, timestamp or text."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return EXCEL_EPOCH + timedelta(days=int(value))
    parsed = pd.to_datetime(str(value), errors="coerce", dayfirst=True)
    if pd.isna(parsed):
        return None
    return parsed.date()


def normalize_time(value: Any) -> Optional[str]:
    """Zero-padded HH:MM so times compare correctly as strings."""
    if value is None:
        return None
    if isinstance(value, (time, datetime)):
        return value.strftime("%H:%M")
    text = str(value).strip()
    if not text:
        return None
    parts = text.split(":")
    try:
        hours = int(parts[0])
        minutes = int(parts[1][:2]) if len(parts) > 1 else 0
    except ValueError:
        raise ValueError(f"Hora inválida: {text}")
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Hora inválida: {text}")
    return f"{hours:02d}:{minutes:02d}"


def parse_time_ranges(value: Any) -> List[Tuple[Optional[str], Optional[str]]]:
    """Split '17:00-18:30;20:30-22:00' into (start, end) pairs."""
    if value is None:
        return []
    if isinstance(value, (time, datetime)):
        return [(normalize_time(value), None)]
    ranges = []
    for chunk in str(value).split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        start, _, end = chunk.partition("-")
        ranges.append((normalize_time(start), normalize_time(end)))
    return ranges


def _find_column(columns: Iterable[str], candidates: List[str]) -> Optional[str]:
    for column in columns:
        lowered = str(column).lower()
        if any(candidate in lowered for candidate in candidates):
            return column
    return None


class EventImporter:
    """
    Imports events from an uploaded workbook.

    Workbooks with an "Eventos" sheet use the multi-sheet layout keyed by
    `idRow`. Anything else is read as a single sheet with fuzzy headers.
    """

    def read_workbook(self, filename: str, content: bytes) -> Dict[str, pd.DataFrame]:
        """Load every sheet of an .xlsx/.xls file, or a CSV as a single sheet."""
        buffer = io.BytesIO(content)
        try:
            if filename.lower().endswith(".csv"):
                return {"Hoja1": pd.read_csv(buffer)}
            return pd.read_excel(buffer, sheet_name=None)
        except (ValueError, zipfile.BadZipFile, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise InvalidInputError(
                ErrorCode.INVALID_IMPORT_FILE, f"Archivo no válido: {e}", parameter="file"
            )

    def import_file(self, db: Session, filename: str, content: bytes) -> ImportResult:
        """
        Import events from a spreadsheet upload.

        Args:
            db: Database session
            filename: Original file name (selects CSV or Excel parsing)
            content: Raw file bytes

        Returns:
            ImportResult with the created count and the first row errors
        """
        if not content:
            raise InvalidInputError(ErrorCode.INVALID_IMPORT_FILE, "No se envió ningún archivo", parameter="file")

        sheets = self.read_workbook(filename, content)
        owner = self._owner(db)

        if any("eventos" in name.lower() for name in sheets):
            count, errors = self._import_multi_sheet(db, sheets, owner)
            mode = "Multi-Sheet"
        else:
            frame = next(iter(sheets.values()), None)
            if frame is None or frame.empty:
                raise InvalidInputError(ErrorCode.INVALID_IMPORT_FILE, "Archivo vacío", parameter="file")
            count, errors = self._import_single_sheet(db, frame, owner)
            mode = "Simple Mode"

        message = f"Importados {count} eventos ({mode})."
        if errors:
            message += f" {len(errors)} errores."
        logger.info("Import finished: %d created, %d errors", count, len(errors))
        return ImportResult(count=count, errors=errors[:MAX_REPORTED_ERRORS], message=message)

    def _owner(self, db: Session) -> User:
        owner = db.query(User).filter_by(role=UserRole.ADMIN).order_by(User.created_at).first()
        if owner is None:
            owner = db.query(User).order_by(User.created_at).first()
        if owner is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, "No admin user found")
        return owner

    def _exists(self, db: Session, title: str) -> bool:
        return db.query(Event.id).filter(func.lower(Event.title) == title.lower()).first() is not None

    def _save(self, db: Session, event: Event, label: str, errors: List[str]) -> bool:
        try:
            db.add(event)
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            errors.append(f"{label}: {e.__class__.__name__}")
            logger.warning("Import row %s failed: %s", label, e)
            return False

    def _import_single_sheet(self, db: Session, frame: pd.DataFrame, owner: User) -> Tuple[int, List[str]]:
        columns = list(frame.columns)
        title_key = _find_column(columns, ["titulo", "title", "nombre", "evento"])
        date_key = _find_column(columns, ["fecha", "date", "dia"])
        description_key = _find_column(columns, ["desc"])
        category_key = _find_column(columns, ["cat"])
        if not title_key:
            raise InvalidInputError(
                ErrorCode.INVALID_IMPORT_FILE,
                "No se encontró columna de Título en modo simple.",
                parameter="file",
            )

        count = 0
        errors: List[str] = []
        for index, row in enumerate(_records(frame), start=2):
            title = _text(row.get(title_key))
            if not title:
                continue
            if self._exists(db, title):
                errors.append(f'Evento "{title}" duplicado.')
                continue
            try:
                day = parse_sheet_date(row.get(date_key)) if date_key else None
            except (ValueError, OverflowError) as e:
                errors.append(f"Fila {index}: {e}")
                continue

            event = Event(
                title=title,
                description=(_text(row.get(description_key)) if description_key else None) or "",
                category=(_text(row.get(category_key)) if category_key else None) or "General",
                is_active=True,
                is_featured=False,
                user_id=owner.id,
                location=Location(name="Local Importado", department="Lima", province="Lima", district=""),
                dates=[EventDate(date=day, price=0)] if day else [],
            )
            if self._save(db, event, f"Fila {index}", errors):
                count += 1
        return count, errors

    def _sheet(self, sheets: Dict[str, pd.DataFrame], name: str) -> List[Row]:
        for sheet_name, frame in sheets.items():
            if name.lower() in sheet_name.lower():
                return _records(frame)
        return []

    def _import_multi_sheet(
        self,
        db: Session,
        sheets: Dict[str, pd.DataFrame],
        owner: User
    ) -> Tuple[int, List[str]]:
        events = self._sheet(sheets, "Eventos")

        images = {r.get("idRow"): _text(r.get("url")) for r in self._sheet(sheets, "Imagen")}

        # Lowest ticket price per event
        prices: Dict[Any, float] = {}
        for r in self._sheet(sheets, "Entradas"):
            if r.get("Precio") is None:
                continue
            price = float(r["Precio"])
            prices[r.get("idRow")] = min(price, prices.get(r.get("idRow"), price))

        tickets: Dict[Any, List[Dict[str, str]]] = {}
        for r in self._sheet(sheets, "PlataformaVenta"):
            url = _text(r.get("URVenta"))
            if url:
                tickets.setdefault(r.get("idRow"), []).append(
                    {"name": _text(r.get("Nombre")) or "Entrada", "url": url}
                )

        schedule: Dict[Any, List[Row]] = {}
        for r in self._sheet(sheets, "FechaHorario"):
            schedule.setdefault(r.get("idRow"), []).append(r)

        count = 0
        errors: List[str] = []
        for evt in events:
            id_row = evt.get("idRow")
            title = _text(
                evt.get("nombreevento") or evt.get("NombreEvento") or evt.get("Titulo") or evt.get("Title")
            )
            if not title:
                logger.warning("Skipping row %s without a title", id_row)
                continue
            if self._exists(db, title):
                errors.append(f'ID {id_row}: Evento "{title}" ya existe.')
                continue

            try:
                dates = self._build_dates(schedule.get(id_row, []), prices.get(id_row))
                latitude, longitude = self._coordinates(evt.get("latitud_longitud"))
            except (ValueError, OverflowError) as e:
                errors.append(f"ID {id_row}: {e}")
                continue

            row_tickets = tickets.get(id_row, [])
            event = Event(
                title=title,
                description=_text(
                    evt.get("DescripcionEvento") or evt.get("DescripciónEvento")
                    or evt.get("Descripcion") or evt.get("Description")
                ) or "",
                category=_text(evt.get("Categoria")) or "General",
                is_featured=_truthy(evt.get("Destacado")),
                is_banner=_truthy(evt.get("esBaner")),
                is_active=True,
                image_url=images.get(id_row),
                website_url=_text(evt.get("PlataformaURLnbbb") or evt.get("URLWeb"))
                or (row_tickets[0]["url"] if row_tickets else None),
                ticket_urls=row_tickets,
                user_id=owner.id,
                location=Location(
                    name=_text(evt.get("NombreLocal")) or "Por definir",
                    address=_text(evt.get("Dirección") or evt.get("Direccion")),
                    department=_text(evt.get("Departamento")) or "Lima",
                    province=_text(evt.get("Provincia")) or "Lima",
                    district=_text(evt.get("Distrito")) or "",
                    latitude=latitude,
                    longitude=longitude,
                ),
                dates=dates,
            )
            if self._save(db, event, f"ID {id_row}", errors):
                count += 1
        return count, errors

    def _build_dates(self, rows: List[Row], price: Optional[float]) -> List[EventDate]:
        dates = []
        for r in rows:
            day = parse_sheet_date(r.get("Fecha"))
            if day is None:
                continue
            ranges = parse_time_ranges(r.get("HoraInicio")) or [(None, None)]
            for start, end in ranges:
                dates.append(EventDate(date=day, start_time=start, end_time=end, price=price or 0))
        return dates

    def _coordinates(self, value: Any) -> Tuple[Optional[float], Optional[float]]:
        text = _text(value)
        if not text or "," not in text:
            return None, None
        latitude, longitude = text.split(",", 1)
        return float(latitude), float(longitude)
