"""Tests for CLI argument parsing and the enter/follow commands."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx
import pytest

from hyperdrive.cli import (
    EnterArgs,
    FollowArgs,
    load_deserializer,
    parse_args,
    parse_key_value,
    positive_float,
    run_enter,
    run_follow,
)
from hyperdrive.config_loader import ConfigError
from hyperdrive.deserializers import ContentTypeDeserializer
from hyperdrive.models import Representor
from tests.conftest import make_transition, mock_transport, representor_body

ROOT = "http://api.example.com/"
TEST_DESERIALIZER = "tests.cli_deserializer:deserialize"

ROOT_DOCUMENT = Representor(
    transitions={
        "order": make_transition("orders/{id}"),
        "detail": make_transition("orders/1"),
        "create": make_transition("orders/", method="POST"),
    },
)
ORDER_DOCUMENT = Representor(attributes={"id": 1})


@pytest.fixture
def transport() -> httpx.MockTransport:
    return mock_transport({
        ROOT: (200, representor_body(ROOT_DOCUMENT)),
        "http://api.example.com/orders/1": (200, representor_body(ORDER_DOCUMENT)),
        "http://api.example.com/orders/": (201, representor_body(ORDER_DOCUMENT)),
    })


def _enter_args(**overrides) -> EnterArgs:
    values = dict(uri=ROOT, config=None, deserializer=TEST_DESERIALIZER, timeout=None, verbose=False)
    values.update(overrides)
    return EnterArgs(**values)


def _follow_args(transition: str, **overrides) -> FollowArgs:
    values = dict(
        uri=ROOT,
        transition=transition,
        parameters={},
        attributes=None,
        config=None,
        deserializer=TEST_DESERIALIZER,
        timeout=None,
        verbose=False,
    )
    values.update(overrides)
    return FollowArgs(**values)


class TestArgumentTypes:
    def test_positive_float(self) -> None:
        assert positive_float("2.5") == 2.5

    @pytest.mark.parametrize("value", ["0", "-1", "abc"])
    def test_positive_float_invalid(self, value: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            positive_float(value)

    def test_key_value_json(self) -> None:
        assert parse_key_value("id=5") == ("id", 5)
        assert parse_key_value('tags=["a"]') == ("tags", ["a"])
        assert parse_key_value("flag=true") == ("flag", True)

    def test_key_value_string(self) -> None:
        assert parse_key_value("name=Ada Lovelace") == ("name", "Ada Lovelace")
        assert parse_key_value("expr=a=b") == ("expr", "a=b")
        assert parse_key_value("empty=") == ("empty", "")

    @pytest.mark.parametrize("value", ["novalue", "=5"])
    def test_key_value_invalid(self, value: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_key_value(value)


class TestParseArgs:
    def test_enter(self) -> None:
        args = parse_args(["enter", ROOT])

        assert isinstance(args, EnterArgs)
        assert args.uri == ROOT
        assert args.config is None
        assert args.deserializer is None
        assert args.timeout is None
        assert args.verbose is False

    def test_enter_options(self) -> None:
        args = parse_args([
            "enter", ROOT,
            "--config", "hyperdrive.yaml",
            "--deserializer", "mypkg.hal:deserialize",
            "--timeout", "5",
            "-v",
        ])

        assert args.config == Path("hyperdrive.yaml")
        assert args.deserializer == "mypkg.hal:deserialize"
        assert args.timeout == 5.0
        assert args.verbose is True

    def test_follow(self) -> None:
        args = parse_args([
            "follow", ROOT, "create",
            "--param", "id=1",
            "--attribute", "item=book",
            "--attribute", "qty=2",
        ])

        assert isinstance(args, FollowArgs)
        assert args.transition == "create"
        assert args.parameters == {"id": 1}
        assert args.attributes == {"item": "book", "qty": 2}

    def test_follow_without_attributes(self) -> None:
        args = parse_args(["follow", ROOT, "self"])
        assert args.parameters == {}
        assert args.attributes is None

    def test_missing_command(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])
        assert exc_info.value.code == 2

    def test_invalid_timeout(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["enter", ROOT, "--timeout", "0"])
        assert exc_info.value.code == 2


class TestLoadDeserializer:
    def test_default(self) -> None:
        deserializer = load_deserializer(None)
        assert isinstance(deserializer, ContentTypeDeserializer)
        assert deserializer.content_types == []

    def test_import(self) -> None:
        deserializer = load_deserializer(TEST_DESERIALIZER)
        assert callable(deserializer)

    @pytest.mark.parametrize(
        "reference",
        ["no_colon", "tests.cli_deserializer:", "does_not_exist_mod:x", "tests.cli_deserializer:missing"],
    )
    def test_invalid(self, reference: str) -> None:
        with pytest.raises(ConfigError):
            load_deserializer(reference)


class TestRunEnter:
    def test_prints_representor(self, transport, capsys) -> None:
        assert run_enter(_enter_args(), transport=transport) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["transitions"]["detail"]["uri"] == "http://api.example.com/orders/1"

    def test_malformed_uri(self, transport, capsys) -> None:
        assert run_enter(_enter_args(uri="not a valid ::uri"), transport=transport) == 1

        err = capsys.readouterr().err
        assert "Creating URI from given URI failed" in err
        assert "code=0" in err

    def test_transport_error(self, capsys) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert run_enter(_enter_args(), transport=httpx.MockTransport(handler)) == 1
        assert "connection error" in capsys.readouterr().err

    def test_config_error(self, tmp_path: Path, capsys) -> None:
        assert run_enter(_enter_args(config=tmp_path / "missing.yaml")) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_config_and_timeout(self, tmp_path: Path, transport, capsys) -> None:
        config = tmp_path / "hyperdrive.yaml"
        config.write_text("timeout: 10\n", encoding="utf-8")

        assert run_enter(_enter_args(config=config, timeout=2.0), transport=transport) == 0


class TestRunFollow:
    def test_follow_with_parameters(self, transport, capsys) -> None:
        args = _follow_args("order", parameters={"id": 1})

        assert run_follow(args, transport=transport) == 0
        assert json.loads(capsys.readouterr().out)["attributes"] == {"id": 1}

    def test_follow_with_attributes(self, transport, capsys) -> None:
        args = _follow_args("create", attributes={"item": "book"})

        assert run_follow(args, transport=transport) == 0
        assert json.loads(capsys.readouterr().out)["attributes"] == {"id": 1}

    def test_unknown_transition(self, transport, capsys) -> None:
        assert run_follow(_follow_args("missing"), transport=transport) == 1

        err = capsys.readouterr().err
        assert "Transition 'missing' not found" in err
        assert "create, detail, order" in err

    def test_root_failure(self, transport, capsys) -> None:
        assert run_follow(_follow_args("order", uri="bad uri"), transport=transport) == 1
        assert "Creating URI from given URI failed" in capsys.readouterr().err
