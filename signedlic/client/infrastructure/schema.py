"""
Infrastructure layer: protobuf messages for the signed license envelope.

The message classes are built from a ``FileDescriptorProto`` registered in a
private descriptor pool, so no generated ``_pb2`` module is needed. Field
numbers must match ``schemas/*.proto`` and must never be reused.
"""

from __future__ import annotations

from enum import IntEnum

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "signedlic"

_Field = descriptor_pb2.FieldDescriptorProto


class KeyType(IntEnum):
    RSA_4096 = 0


class SignatureAlgorithm(IntEnum):
    RSA_PSS_SHA512 = 0


def parse_key_type(value: int) -> KeyType | int:
    """Known ``KeyType`` or the raw tag, preserved as-is."""
    try:
        return KeyType(value)
    except ValueError:
        return value


def parse_signature_algorithm(value: int) -> SignatureAlgorithm | int:
    """Known ``SignatureAlgorithm`` or the raw tag, preserved as-is."""
    try:
        return SignatureAlgorithm(value)
    except ValueError:
        return value


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    type_name: str | None = None,
    oneof_index: int | None = None,
) -> None:
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_Field.LABEL_OPTIONAL,
    )
    if type_name is not None:
        field.type_name = f".{PACKAGE}.{type_name}"
    if oneof_index is not None:
        field.oneof_index = oneof_index


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=f"{PACKAGE}/license.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    bundle = file_proto.message_type.add(name="SignedBundle")
    key_type = bundle.enum_type.add(name="KeyType")
    for member in KeyType:
        key_type.value.add(name=member.name, number=member.value)
    algorithm = bundle.enum_type.add(name="SignatureAlgorithm")
    for member in SignatureAlgorithm:
        algorithm.value.add(name=member.name, number=member.value)
    _add_field(bundle, "key_type", 1, _Field.TYPE_ENUM, "SignedBundle.KeyType")
    _add_field(bundle, "public_key", 2, _Field.TYPE_BYTES)
    _add_field(
        bundle,
        "signature_algorithm",
        3,
        _Field.TYPE_ENUM,
        "SignedBundle.SignatureAlgorithm",
    )
    _add_field(bundle, "signature", 4, _Field.TYPE_BYTES)
    _add_field(bundle, "signed_message", 5, _Field.TYPE_BYTES)

    trial = file_proto.message_type.add(name="TrialLicenseInfo")
    _add_field(trial, "expiration_timestamp_in_sec", 1, _Field.TYPE_INT64)

    purchased = file_proto.message_type.add(name="PurchasedLicenseInfo")
    _add_field(purchased, "license_key", 1, _Field.TYPE_STRING)

    info = file_proto.message_type.add(name="LicenseInfo")
    info.oneof_decl.add(name="specific_info")
    _add_field(info, "device_id", 1, _Field.TYPE_BYTES)
    _add_field(info, "trial", 2, _Field.TYPE_MESSAGE, "TrialLicenseInfo", 0)
    _add_field(info, "purchased", 3, _Field.TYPE_MESSAGE, "PurchasedLicenseInfo", 0)
    _add_field(info, "extra_info", 4, _Field.TYPE_BYTES)

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str) -> type:
    return message_factory.GetMessageClass(
        _pool.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


SignedBundle = _message_class("SignedBundle")
LicenseInfo = _message_class("LicenseInfo")
TrialLicenseInfo = _message_class("TrialLicenseInfo")
PurchasedLicenseInfo = _message_class("PurchasedLicenseInfo")

__all__ = [
    "KeyType",
    "LicenseInfo",
    "PurchasedLicenseInfo",
    "SignatureAlgorithm",
    "SignedBundle",
    "TrialLicenseInfo",
    "parse_key_type",
    "parse_signature_algorithm",
]
