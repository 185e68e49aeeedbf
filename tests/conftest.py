import os
import sys
from pathlib import Path

# in-memory database and fast auto-save timings for the whole suite
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTOSAVE_DEBOUNCE_MS", "50")
os.environ.setdefault("AUTOSAVE_RETRY_MS", "50")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import fitz  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402


def read_pdf_text(data: bytes) -> str:
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return "\n".join(page.get_text("text") for page in doc)
    finally:
        doc.close()


@pytest.fixture
def pdf_text():
    return read_pdf_text


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def owner_headers():
    return {"X-User-Email": "demo@entrada.app"}


def make_fillable_template(path: Path, field_names):
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((40, 40), "OFFICIAL FORM TEMPLATE", fontsize=10)
    y = 80
    for name in field_names:
        widget = fitz.Widget()
        widget.field_name = name
        widget.field_type = fitz.PDF_WIDGET_TYPE_TEXT
        widget.rect = fitz.Rect(100, y, 500, y + 20)
        widget.field_value = ""
        page.add_widget(widget)
        y += 30
    doc.save(str(path))
    doc.close()


def make_plain_template(path: Path, label: str):
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((40, 40), label, fontsize=10)
    doc.save(str(path))
    doc.close()


@pytest.fixture
def templates_dir(tmp_path):
    """
    GC-210: fillable, GC-220: flat (overlay only), FL-105: corrupt,
    GC-210CA and GC-020: missing.
    """
    make_fillable_template(
        tmp_path / "GC-210.pdf",
        [
            "topmostSubform[0].Page1[0].StdP1Header_sf[0].CourtInfo[0].CaseNumber_ft[0]",
            "minor_name",
            "guardian_name",
        ],
    )
    make_plain_template(tmp_path / "GC-220.pdf", "GC-220 FLAT TEMPLATE")
    (tmp_path / "FL-105.pdf").write_bytes(b"%PDF-1.7\nthis is not really a pdf")
    return tmp_path


@pytest.fixture
def fillable_template():
    return make_fillable_template
