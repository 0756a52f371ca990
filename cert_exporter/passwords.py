"""Lookup of passphrases for encrypted certificate material."""

import logging

logger = logging.getLogger("cert-exporter.passwords")

PASSWORD_KEY = "password"
PASSWORD_SECRET_SUFFIX = "-password"


def strip_extension(name):
    """'tls.crt' -> 'tls', 'bundle' -> 'bundle'."""
    dot = name.rfind(".")
    if dot == -1:
        return name
    return name[:dot]


class PasswordResolver:
    """
    Finds the password for one data entry of a resource.

    Lookup order, first non-empty value wins:

    1. key ``password`` in the resource itself (only when ``check_same_resource``),
    2. key ``<entry without extension>.password`` in secret ``<resource>-password``,
    3. key ``<entry>.password`` in that same secret.

    Every miss is logged and falls through. No password at all is returned as
    an empty string, meaning the material is not encrypted.
    """

    def __init__(self, kube_client, check_same_resource=True):
        self.kube_client = kube_client
        self.check_same_resource = check_same_resource

    def resolve(self, item, entry_name):
        if self.check_same_resource:
            password = _decode(item.data.get(PASSWORD_KEY))
            if password:
                return password
            logger.info(f"Password not present within {item.kind.lower()} {item.name}")

        sibling_name = item.name + PASSWORD_SECRET_SUFFIX
        try:
            sibling = self.kube_client.get_secret(item.namespace, sibling_name)
        except Exception as e:
            logger.info(
                f"Password secret '{sibling_name}' not available for {item.kind.lower()} {item.name}: {e}")
            return ""

        keys = [strip_extension(entry_name) + ".password", entry_name + ".password"]
        for key in dict.fromkeys(keys):
            password = _decode(sibling.data.get(key))
            if password:
                return password
            logger.info(f"Password key '{key}' not present in secret {sibling_name}")
        return ""


def _decode(value):
    if not value:
        return ""
    return value.decode("utf-8", errors="replace")
