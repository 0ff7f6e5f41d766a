"""Network and register address validators for fieldbus devices.

Validates device IP addresses and protocol-specific register addresses,
providing clear error messages for malformed values.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar


@dataclass
class ValidationResult:
    """Result of address validation."""

    valid: bool
    error: str | None = None
    normalized: str | None = None  # Normalized form of address if valid


class AddressValidator(ABC):
    """Base class for address validators."""

    @property
    @abstractmethod
    def protocol_name(self) -> str:
        """Human-readable protocol name for error messages."""
        ...

    @abstractmethod
    def validate(self, address: str) -> ValidationResult:
        """Validate an address string.

        Args:
            address: Raw address string from configuration.

        Returns:
            ValidationResult with validity status and any errors.
        """
        ...

    def __call__(self, address: str) -> ValidationResult:
        """Allow validator to be called directly."""
        return self.validate(address)


class IPv4AddressValidator(AddressValidator):
    """Validator for dotted-quad IPv4 addresses.

    Leading zeros are dropped in the normalized form ("192.168.001.010"
    becomes "192.168.1.10").
    """

    _ADDRESS_PATTERN = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")

    @property
    def protocol_name(self) -> str:
        return "IPv4"

    def validate(self, address: str) -> ValidationResult:
        address = address.strip()

        match = self._ADDRESS_PATTERN.match(address)
        if not match:
            return ValidationResult(
                valid=False,
                error=f"Invalid IP address format: '{address}'. "
                "Expected dotted quad like '192.168.1.10'.",
            )

        octets = [int(part) for part in match.groups()]
        for octet in octets:
            if octet > 255:
                return ValidationResult(
                    valid=False,
                    error=f"IP address octet out of range (0-255): {octet} in '{address}'.",
                )

        return ValidationResult(valid=True, normalized=".".join(str(o) for o in octets))


class ModbusRegisterValidator(AddressValidator):
    """Validator for zero-based Modbus register offsets.

    Accepts a plain offset ("1000") or a register table prefix
    ("holding_register:300"). Offsets must fit a 16-bit address space.
    """

    _ADDRESS_PATTERN = re.compile(r"^(?:([a-z_]+):)?(\d{1,5})$")

    _TABLES: ClassVar[frozenset[str]] = frozenset(
        {"coil", "discrete_input", "holding_register", "input_register"}
    )

    @property
    def protocol_name(self) -> str:
        return "Modbus"

    def validate(self, address: str) -> ValidationResult:
        address = address.strip()

        match = self._ADDRESS_PATTERN.match(address)
        if not match:
            return ValidationResult(
                valid=False,
                error=f"Invalid Modbus register address: '{address}'. "
                "Expected offset like '1000' or 'holding_register:300'.",
            )

        table = match.group(1)
        if table is not None and table not in self._TABLES:
            return ValidationResult(
                valid=False,
                error=f"Unknown Modbus register table '{table}'. "
                "Valid tables: coil, discrete_input, holding_register, input_register.",
            )

        offset = int(match.group(2))
        if offset > 65535:
            return ValidationResult(
                valid=False,
                error=f"Modbus register offset {offset} exceeds 65535.",
            )

        prefix = f"{table}:" if table else ""
        return ValidationResult(valid=True, normalized=f"{prefix}{offset}")


def get_validator_for_protocol(protocol: str) -> AddressValidator | None:
    """Get the register address validator for a protocol name.

    Args:
        protocol: Protocol name (modbus_tcp, modbus_rtu, ...)

    Returns:
        AddressValidator instance or None if the protocol has no register checks.
    """
    validators: dict[str, type[AddressValidator]] = {
        "modbus": ModbusRegisterValidator,
        "modbus_tcp": ModbusRegisterValidator,
        "modbus_rtu": ModbusRegisterValidator,
    }

    protocol_lower = protocol.lower().replace("-", "_").replace(" ", "_")
    validator_class = validators.get(protocol_lower)

    if validator_class:
        return validator_class()
    return None


def validate_register_address(address: int | str, protocol: str) -> ValidationResult:
    """Validate a register address for a specific protocol.

    Unknown protocols accept any address.
    """
    validator = get_validator_for_protocol(protocol)

    if validator is None:
        return ValidationResult(valid=True, normalized=str(address))

    return validator.validate(str(address))
