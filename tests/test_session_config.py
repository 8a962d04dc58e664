import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest

from storefront.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, load_settings
from storefront.errors import ConfigError
from storefront.ftypes import Either, Maybe
from storefront.session import Session


def test_default_settings():
    settings = load_settings({})
    assert settings.api_base_url == DEFAULT_API_URL
    assert settings.timeout == DEFAULT_TIMEOUT
    assert settings.log_level == "INFO"


def test_settings_from_environment():
    settings = load_settings(
        {"SHOP_API_URL": "https://shop.example/api/", "SHOP_API_TIMEOUT": "2.5", "SHOP_LOG_LEVEL": "debug"}
    )
    assert settings.api_base_url == "https://shop.example/api"
    assert settings.timeout == 2.5
    assert settings.log_level == "DEBUG"


def test_timeout_can_be_disabled():
    assert load_settings({"SHOP_API_TIMEOUT": "0"}).timeout is None


@pytest.mark.parametrize("raw", ["soon", "-1"])
def test_bad_timeout(raw):
    with pytest.raises(ConfigError):
        load_settings({"SHOP_API_TIMEOUT": raw})


def test_session_lifecycle():
    session = Session.from_login_payload(
        {"token": "abc", "user": {"_id": "u1", "name": "Root", "email": "root@shop", "role": "admin"}}
    )
    assert session.is_authenticated
    assert session.is_admin
    assert session.auth_headers() == {"Authorization": "Bearer abc"}

    session.logout()
    assert not session.is_authenticated
    assert not session.is_admin
    assert session.auth_headers() == {}


def test_customer_is_not_admin():
    session = Session.from_login_payload({"token": "t", "user": {"name": "A", "email": "a@b"}})
    assert session.customer.role == "customer"
    assert not session.is_admin


def test_maybe_and_either():
    assert Maybe.of(None).is_none()
    assert Maybe.of(0).get_or_else(5) == 0
    assert Either.left("boom").error == "boom"
    assert Either.right(2).map(lambda x: x * 2).get_or_else(0) == 4
    assert Either.right(2).error is None
