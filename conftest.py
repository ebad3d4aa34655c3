"""
Shared pytest fixtures for the order forms test suite.

The purchase-form template is built on the fly with reportlab's AcroForm
support so tests never depend on the real university PDF.
"""
import io
import os
import sys
from datetime import date

import pytest

_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from orderforms.core.config import Profile
from orderforms.core.ids import sequential_ids
from orderforms.forms.purchase_form import PURCHASE_FORM_FIELDS
from orderforms.intake.transformer import OrderLineItem


# ── Template PDFs ─────────────────────────────────────────────────────────────

def build_template(field_names=None, checkbox_names=()):
    """One-page fillable PDF with a text field per name (and optional checkboxes)."""
    from reportlab.lib.pagesizes import letter
    from reportlab.pdfgen import canvas

    if field_names is None:
        field_names = list(PURCHASE_FORM_FIELDS.values())
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(40, 750, "Student Organization Purchase Form")
    y = 700
    for name in field_names:
        c.setFont("Helvetica", 8)
        c.drawString(40, y + 22, name)
        c.acroForm.textfield(name=name, x=40, y=y, width=400, height=18,
                             borderWidth=1, fontSize=9)
        y -= 50
    for name in checkbox_names:
        c.acroForm.checkbox(name=name, x=460, y=y, size=14)
        y -= 30
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture(scope="session")
def template_bytes():
    return build_template()


@pytest.fixture
def template_resolver(template_bytes):
    return lambda: template_bytes


# ── Temp data directory (per-test isolation) ──────────────────────────────────

@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Redirect data/output/config paths to an isolated tmp directory."""
    from orderforms.core import paths

    data = str(tmp_path / "data")
    os.makedirs(data, exist_ok=True)
    monkeypatch.setattr(paths, "DATA_DIR", data)
    monkeypatch.setattr(paths, "LOG_DIR", os.path.join(data, "logs"))
    monkeypatch.setattr(paths, "OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setattr(paths, "CONFIG_PATH", str(tmp_path / "orderforms_config.json"))
    monkeypatch.setattr(paths, "PURCHASE_FORM_PATH", os.path.join(data, "purchase_form.pdf"))
    for env in ("ORDERFORMS_ORG_NAME", "ORDERFORMS_CONTACT_NAME", "ORDERFORMS_CONTACT_EMAIL",
                "ORDERFORMS_CONTACT_PHONE", "ORDERFORMS_PROJECT", "ORDERFORMS_FORM_ITEM_LIMIT"):
        monkeypatch.delenv(env, raising=False)
    return data


# ── Sample data factories ─────────────────────────────────────────────────────

ROUND_TRIP_LINE = ("Widget\tAcme\tP-100\thttps://acme.test/widget\t$10.00\t3\t0\t2.50"
                   "\t32.50\tGround\tFragile")


@pytest.fixture
def round_trip_line():
    return ROUND_TRIP_LINE


@pytest.fixture
def sample_paste():
    """Three valid rows across two vendors (Acme twice, Pololu once)."""
    return "\n".join([
        ROUND_TRIP_LINE,
        "Servo\tPololu\t\thttps://www.pololu.com/product/1057\t$12.95\t4\t\t$5.00\t\t\t",
        "Bolt pack\tAcme\tB-7\thttps://acme.test/bolts\t1,200.00\t1\t\t\t\tFreight\t",
    ])


@pytest.fixture
def ids():
    return sequential_ids()


@pytest.fixture
def profile():
    return Profile(
        org_name="Comet Robotics",
        contact_name="Jane Doe",
        contact_email="jane.doe@utdallas.edu",
        contact_phone="(555) 555-0100",
    )


def make_item(name="Widget", vendor="Acme", quantity=1, price_cents=1000,
              shipping_cents=0, url="https://acme.test/widget", notes=None):
    return OrderLineItem(
        name=name, vendor=vendor, quantity=quantity, url=url,
        price_per_unit_cents=price_cents, shipping_and_handling_cents=shipping_cents,
        notes=notes,
    )


@pytest.fixture
def request_date():
    return date(2026, 3, 7)


# ── Flask test client ─────────────────────────────────────────────────────────

@pytest.fixture
def app(temp_data_dir, profile, template_resolver):
    """Create Flask app configured for testing."""
    from app import create_app
    app = create_app(profile=profile, template_resolver=template_resolver, setup_logs=False)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
