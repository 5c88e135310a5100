import shutil
import tempfile
import unittest
from datetime import timedelta
from decimal import Decimal
from io import BytesIO
from pathlib import Path

from PIL import Image

from agromart import create_app
from agromart.extensions import db
from agromart.models import Equipment, Listing
from agromart.models.base import utcnow
from agromart.services import AuthService

PASSWORD = "secret-pass"


def png_bytes(color=(40, 160, 60)):
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.upload_dir = tempfile.mkdtemp(prefix="agromart-uploads-")
        self.app = create_app("testing")
        self.app.config["UPLOAD_DIR"] = self.upload_dir
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.client = self.app.test_client()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()
        shutil.rmtree(self.upload_dir, ignore_errors=True)

    def create_user(self, email="farmer@example.com", role="farmer", full_name="Test Farmer"):
        return AuthService.register_user(full_name=full_name, email=email, password=PASSWORD, role=role)

    def login(self, email):
        response = self.client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
        self.assertEqual(response.status_code, 200)
        return response

    def login_as_admin(self):
        admin = self.create_user(email="admin@example.com", role="admin", full_name="Admin")
        self.login(admin.email)
        return admin

    def login_as_farmer(self, email="farmer@example.com"):
        farmer = self.create_user(email=email)
        self.login(farmer.email)
        return farmer

    def stored_files(self):
        return [path for path in Path(self.upload_dir).rglob("*") if path.is_file()]

    def add_listing(self, **overrides):
        values = {
            "name": "Basmati seed",
            "category": "Seeds",
            "quantity": 10,
            "price": Decimal("100"),
            "location": "Pune",
        }
        values.update(overrides)
        listing = Listing(**values)
        db.session.add(listing)
        db.session.commit()
        return listing

    def add_equipment(self, **overrides):
        now = utcnow()
        values = {
            "name": "Mahindra 575",
            "category": "Tractor",
            "price_per_hour": Decimal("45"),
            "available_from": now - timedelta(days=365),
            "available_to": now + timedelta(days=365),
        }
        values.update(overrides)
        equipment = Equipment(**values)
        db.session.add(equipment)
        db.session.commit()
        return equipment
