"""
Tests for settings, table config and logging setup.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from message_store.config import Settings, TableConfig, get_settings
from message_store.logging_utils import (
    CustomJsonFormatter,
    get_operation_id,
    operation_context,
    setup_logging,
)
from message_store.schemas import IdPolicy, Message


class TestSettings:

    def test_settings_from_env(self, clean_settings):
        clean_settings.setenv("MESSAGES_TABLE", "FromEnv")
        clean_settings.setenv("MESSAGE_ID_POLICY", "always")

        settings = get_settings()

        assert settings.MESSAGES_TABLE == "FromEnv"
        assert settings.MESSAGE_ID_POLICY is IdPolicy.ALWAYS
        assert settings.LOG_LEVEL

    def test_settings_are_cached(self, clean_settings):
        assert get_settings() is get_settings()

    def test_table_name_required(self, clean_settings, tmp_path):
        clean_settings.delenv("MESSAGES_TABLE", raising=False)
        clean_settings.chdir(tmp_path)

        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_policy_rejected(self, clean_settings):
        clean_settings.setenv("MESSAGE_ID_POLICY", "sometimes")

        with pytest.raises(ValidationError):
            Settings()

    def test_policy_drives_message_creation(self, clean_settings):
        clean_settings.setenv("MESSAGE_ID_POLICY", "always")
        policy = get_settings().MESSAGE_ID_POLICY

        message = Message.create({"id": "abc-123", "text": "hello"}, id_policy=policy)

        assert message.id != "abc-123"


class TestTableConfig:

    def test_from_settings(self, clean_settings):
        clean_settings.setenv("MESSAGES_TABLE", "Resolved")
        assert TableConfig.from_settings().table_name == "Resolved"

    def test_from_explicit_settings(self):
        settings = Settings(MESSAGES_TABLE="Explicit")
        assert TableConfig.from_settings(settings).table_name == "Explicit"

    def test_empty_table_name_rejected(self):
        with pytest.raises(ValidationError):
            TableConfig(table_name="")

    def test_config_is_frozen(self):
        config = TableConfig(table_name="MessagesTable")
        with pytest.raises(ValidationError):
            config.table_name = "Other"


class TestLogging:

    def test_operation_context(self):
        assert get_operation_id() is None
        with operation_context("op-1") as op_id:
            assert op_id == "op-1"
            assert get_operation_id() == "op-1"
        assert get_operation_id() is None

    def test_operation_context_generates_id(self):
        with operation_context() as op_id:
            assert op_id
            assert get_operation_id() == op_id

    def test_json_formatter_fields(self):
        formatter = CustomJsonFormatter('%(ts)s %(level)s %(name)s %(message)s')
        record = logging.LogRecord("message_store.table", logging.INFO, __file__, 1, "hello", None, None)

        with operation_context("op-2"):
            output = json.loads(formatter.format(record))

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["operation_id"] == "op-2"
        assert output["ts"].endswith("Z")

    def test_setup_logging(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            logger = setup_logging("debug")
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0].formatter, CustomJsonFormatter)
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_setup_logging_defaults_to_settings_level(self, clean_settings):
        clean_settings.setenv("LOG_LEVEL", "warning")
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            logger = setup_logging()
            assert logger.level == logging.WARNING
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
