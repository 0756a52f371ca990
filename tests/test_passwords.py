"""Tests for PasswordResolver."""

import pytest
from kubernetes.client.rest import ApiException
from cert_exporter.passwords import PasswordResolver, strip_extension
from cert_exporter.resources import CONFIG_MAP, SECRET, ResourceItem


def make_item(data=None, kind=SECRET, name="keystore", namespace="default"):
    return ResourceItem(kind=kind, namespace=namespace, name=name, data=data or {})


def password_secret(data, name="keystore-password"):
    return ResourceItem(kind=SECRET, namespace="default", name=name, data=data)


@pytest.mark.parametrize("name,expected", [
    ("tls.crt", "tls"),
    ("keystore.p12", "keystore"),
    ("archive.tar.gz", "archive.tar"),
    ("bundle", "bundle"),
    (".crt", ""),
])
def test_strip_extension(name, expected):
    assert strip_extension(name) == expected


def test_same_secret_password_wins(kube_client):
    kube_client.get_secret.side_effect = None
    kube_client.get_secret.return_value = password_secret({"keystore.password": b"sibling"})
    item = make_item({"keystore.p12": b"...", "password": b"same"})

    assert PasswordResolver(kube_client).resolve(item, "keystore.p12") == "same"
    kube_client.get_secret.assert_not_called()


def test_sibling_base_name_key(kube_client):
    kube_client.get_secret.side_effect = None
    kube_client.get_secret.return_value = password_secret({
        "keystore.password": b"base",
        "keystore.p12.password": b"full",
    })
    item = make_item({"keystore.p12": b"..."})

    assert PasswordResolver(kube_client).resolve(item, "keystore.p12") == "base"
    kube_client.get_secret.assert_called_once_with("default", "keystore-password")


def test_sibling_full_name_key(kube_client):
    kube_client.get_secret.side_effect = None
    kube_client.get_secret.return_value = password_secret({"keystore.p12.password": b"full"})
    item = make_item({"keystore.p12": b"..."})

    assert PasswordResolver(kube_client).resolve(item, "keystore.p12") == "full"


def test_empty_values_fall_through(kube_client):
    kube_client.get_secret.side_effect = None
    kube_client.get_secret.return_value = password_secret({
        "keystore.password": b"",
        "keystore.p12.password": b"full",
    })
    item = make_item({"keystore.p12": b"...", "password": b""})

    assert PasswordResolver(kube_client).resolve(item, "keystore.p12") == "full"


def test_no_password_anywhere(kube_client):
    item = make_item({"tls.crt": b"..."})

    assert PasswordResolver(kube_client).resolve(item, "tls.crt") == ""
    kube_client.get_secret.assert_called_once_with("default", "keystore-password")


def test_lookup_errors_are_not_fatal(kube_client):
    kube_client.get_secret.side_effect = ApiException(status=500, reason="boom")
    item = make_item({"tls.crt": b"..."})

    assert PasswordResolver(kube_client).resolve(item, "tls.crt") == ""


def test_config_maps_skip_same_resource_key(kube_client):
    kube_client.get_secret.side_effect = None
    kube_client.get_secret.return_value = password_secret({"truststore.password": b"sibling"})
    item = make_item({"truststore.jks": b"...", "password": b"ignored"}, kind=CONFIG_MAP)

    resolver = PasswordResolver(kube_client, check_same_resource=False)
    assert resolver.resolve(item, "truststore.jks") == "sibling"


def test_config_map_without_sibling(kube_client):
    item = make_item({"ca.crt": b"...", "password": b"ignored"}, kind=CONFIG_MAP)

    resolver = PasswordResolver(kube_client, check_same_resource=False)
    assert resolver.resolve(item, "ca.crt") == ""
