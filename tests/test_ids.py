"""Tests for generated identifiers."""

import random
import re
from datetime import datetime

from brewops_forms.ids import generate_password, next_supplier_id, production_id


class TestProductionId:
    """Tests for production id generation."""

    def test_format(self) -> None:
        generated = production_id(datetime(2024, 12, 31, 9, 5), random.Random(7))

        assert re.fullmatch(r"PROD-20241231-0905-[A-Z0-9]{5}", generated)

    def test_reproducible_with_seed(self) -> None:
        now = datetime(2024, 1, 1)

        assert production_id(now, random.Random(3)) == production_id(now, random.Random(3))


class TestSupplierId:
    """Tests for supplier id allocation."""

    def test_first_supplier(self) -> None:
        assert next_supplier_id([]) == "SUP0001"

    def test_after_highest(self) -> None:
        assert next_supplier_id(["SUP0002", "SUP0010", None, "OTHER", "SUP0007"]) == "SUP0011"


class TestPassword:
    """Tests for generated passwords."""

    def test_length_and_alphabet(self) -> None:
        password = generate_password(16)

        assert len(password) == 16
        assert password.isalnum()
