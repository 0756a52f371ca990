"""Decoding of certificate material into the fields the exporters publish."""

import logging
from dataclasses import dataclass
from typing import List

from cryptography import x509
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

logger = logging.getLogger("cert-exporter.certificates")

PEM_MARKER = b"-----BEGIN"


class CertificateDecodeError(Exception):
    """Raised when no certificate could be read from the given bytes."""


@dataclass(frozen=True)
class CertificateInfo:
    issuer_cn: str
    subject_cn: str
    not_after: float


def _common_name(name):
    attributes = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return ""
    return str(attributes[0].value)


def describe(certificate):
    return CertificateInfo(
        issuer_cn=_common_name(certificate.issuer),
        subject_cn=_common_name(certificate.subject),
        not_after=certificate.not_valid_after_utc.timestamp(),
    )


def _load_pkcs12(data, password):
    bundle = pkcs12.load_pkcs12(data, password.encode("utf-8") if password else None)
    certificates = []
    if bundle.cert is not None:
        certificates.append(bundle.cert.certificate)
    certificates.extend(c.certificate for c in bundle.additional_certs)
    return certificates


def load_certificates(data, password=""):
    """
    Load every certificate contained in ``data``.

    PEM input may hold several CERTIFICATE blocks alongside keys; only the
    certificates are returned. Anything else is tried as PKCS#12 (using
    ``password``) and then as a single DER certificate.
    """
    if not data:
        raise CertificateDecodeError("no data")

    if PEM_MARKER in data:
        try:
            return x509.load_pem_x509_certificates(data)
        except ValueError as e:
            raise CertificateDecodeError(f"invalid PEM certificate data: {e}") from e

    try:
        certificates = _load_pkcs12(data, password)
        if certificates:
            return certificates
    except (ValueError, TypeError) as e:
        logger.debug(f"Data is not PKCS#12: {e}")

    try:
        return [x509.load_der_x509_certificate(data)]
    except ValueError as e:
        raise CertificateDecodeError(f"unable to decode certificate data: {e}") from e


def decode_certificates(data, password="") -> List[CertificateInfo]:
    return [describe(c) for c in load_certificates(data, password)]
