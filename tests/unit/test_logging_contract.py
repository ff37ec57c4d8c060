# PATH: tests/unit/test_logging_contract.py
"""
Tests for the logging contract.

Only extra={"context": {...}} is allowed as logger kwargs; JSON output
carries the context and global context.
"""

import ast
import json
import logging
import unittest
from decimal import Decimal
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List

from core.logging import (
    ConsoleFormatter,
    JSONFormatter,
    clear_global_context,
    get_logger,
    set_global_context,
)

PROJECT_ROOT = Path(__file__).parent.parent.parent
SOURCE_DIRS = ["core", "market", "strategy", "execution", "monitoring"]


class TestLoggingContractEnforcement(unittest.TestCase):
    """AST-based tests for logging contract."""

    ALLOWED_KWARGS = {"exc_info", "extra", "stack_info", "stacklevel"}

    def _find_logger_violations(self, source_code: str) -> List[Dict[str, Any]]:
        violations = []
        tree = ast.parse(source_code)

        for node in ast.walk(tree):
            if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
                continue
            if node.func.attr not in ("debug", "info", "warning", "error", "critical", "exception"):
                continue

            obj = node.func.value
            if isinstance(obj, ast.Name):
                is_logger = obj.id == "logger" or obj.id.endswith("_logger")
            elif isinstance(obj, ast.Attribute):
                is_logger = obj.attr in ("logger", "_logger")
            else:
                is_logger = False
            if not is_logger:
                continue

            for kw in node.keywords:
                if kw.arg and kw.arg not in self.ALLOWED_KWARGS:
                    violations.append({"line": node.lineno, "invalid_kwarg": kw.arg})
        return violations

    def test_sources_have_no_invalid_kwargs(self):
        files = [p for d in SOURCE_DIRS for p in (PROJECT_ROOT / d).glob("*.py")]
        files.append(PROJECT_ROOT / "run_sim.py")
        self.assertTrue(files)

        for path in files:
            with self.subTest(path=path.name):
                violations = self._find_logger_violations(path.read_text(encoding="utf-8"))
                self.assertEqual(violations, [], f"{path}: {violations}")


class TestFormatters(unittest.TestCase):

    def setUp(self):
        self.stream = StringIO()
        self.handler = logging.StreamHandler(self.stream)
        self.base = logging.getLogger("flashsim.test.formatters")
        self.base.handlers = [self.handler]
        self.base.propagate = False
        self.base.setLevel(logging.DEBUG)

    def tearDown(self):
        clear_global_context()
        self.base.handlers = []

    def test_json_includes_context(self):
        self.handler.setFormatter(JSONFormatter())
        set_global_context(service="flashsim-test")
        logger = get_logger("flashsim.test.formatters", route="spatial")

        logger.info("Submitted", extra={"context": {"net": Decimal("12.5")}})

        entry = json.loads(self.stream.getvalue().strip())
        self.assertEqual(entry["message"], "Submitted")
        self.assertEqual(entry["level"], "INFO")
        self.assertEqual(entry["context"]["route"], "spatial")
        self.assertEqual(entry["context"]["net"], "12.5")
        self.assertEqual(entry["context"]["service"], "flashsim-test")

    def test_json_lifts_block(self):
        self.handler.setFormatter(JSONFormatter())
        logger = get_logger("flashsim.test.formatters")

        logger.info("New block mined", extra={"context": {"block": 19845322, "severity": "info"}})

        entry = json.loads(self.stream.getvalue().strip())
        self.assertEqual(entry["block"], 19845322)
        self.assertNotIn("block", entry["context"])
        self.assertEqual(entry["context"]["severity"], "info")

    def test_console_prefixes_block(self):
        self.handler.setFormatter(ConsoleFormatter())
        logger = get_logger("flashsim.test.formatters")

        logger.info("New block mined", extra={"context": {"block": 7}})

        self.assertIn("| #7 New block mined", self.stream.getvalue())

    def test_console_truncates_context(self):
        self.handler.setFormatter(ConsoleFormatter())
        logger = get_logger("flashsim.test.formatters")

        logger.warning("Busy", extra={"context": {"a": 1, "b": 2, "c": 3, "d": 4}})

        line = self.stream.getvalue()
        self.assertIn("WARNING", line)
        self.assertIn("Busy", line)
        self.assertIn("(+1 more)", line)
