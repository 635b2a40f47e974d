#!/usr/bin/env python3
"""
File: config_parser.py
Author: Bastian Cerf
Date: 12/08/2025
Description:
    Read and parse a configuration file in the .ini format. The file
    data is validated against a JSON schema. A default .ini file is
    generated from the schema when the configuration file doesn't exist.

    The schema declares one block per .ini section and, inside it, one
    block per key with the rules of the value:
    - type: int, float, str, bool or time ('HH:MM', converted to minutes
        from midnight)
    - required: the value cannot be left empty (the key itself is always
        mandatory)
    - default: value written in the generated default file
    - comment: help text written above the key in the generated file
    - min/max: range of an int, float or time value
    - enum: list of the accepted values
    Only the type is mandatory.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
import json
import configparser
from pathlib import Path
from typing import Any, Callable, Final, Iterable, NamedTuple, Optional, TextIO
from types import MappingProxyType

# Internal libraries
from core.calculation.time_window import parse_time

logger = logging.getLogger(__name__)


########################################################################
#                 Configuration parser custom error                    #
########################################################################


class ConfigError(Exception):
    """
    General configuration file error. It's the only error raised by this
    module.
    """

    def __init__(self, msg: str):
        super().__init__(msg)


########################################################################
#                          Value converters                            #
########################################################################


def _str_to_bool(s: str) -> bool:
    """
    Convert the given string to a bool, if possible.

    Raises:
        ValueError: string doesn't contain a valid boolean.
    """
    s = s.strip().lower()
    if s in {"true", "1", "yes", "on"}:
        return True
    elif s in {"false", "0", "no", "off"}:
        return False

    raise ValueError(f"Invalid boolean string: {s}")


def _default_to_str(value: Any, vartype: str) -> str:
    """
    Write a schema default value as it must appear in the .ini file.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if vartype == "time" and isinstance(value, int):
        return f"{value // 60:02d}:{value % 60:02d}"
    return str(value)


class ConversionResult(NamedTuple):
    """
    Holds the result of `_SchemaEntry.check_and_convert()`.

    The message is only available if `error` is `True` and the `value`
    only if `error` is `False`.
    """

    error: bool
    message: Optional[str]
    value: Optional[Any]


########################################################################
#                            Schema entry                              #
########################################################################


class _SchemaEntry:
    """
    Rules of one key-value pair of the .ini file, as declared in the
    schema. Converts the raw .ini string to the declared type and checks
    the constraints.
    """

    # Map the value types with their converting function
    _CONV_MAP: Final[dict[str, Callable[[str], Any]]] = {
        "int": int,
        "float": float,
        "str": str,
        "bool": _str_to_bool,
        "time": parse_time,
    }

    # Schema fields with their accepted JSON types
    _FIELDS: Final[dict[str, tuple[type, ...]]] = {
        "type": (str,),
        "required": (bool,),
        "default": (int, float, str, bool),
        "comment": (str,),
        "min": (int, float),
        "max": (int, float),
        "enum": (list,),
    }

    def __init__(self, key: str, entry: dict[str, Any]):
        """
        Parse the schema block of a key.

        Args:
            key (str): The key, used in error messages.
            entry (dict[str, Any]): Block from the JSON schema.

        Raises:
            ConfigError: Invalid block.
        """
        self._key = key

        extra = set(entry.keys()) - set(self._FIELDS.keys())
        if extra:
            raise ConfigError(
                f"Unrecognized field(s): '{', '.join(sorted(extra))}' for key '{key}'."
            )

        for field, vartypes in self._FIELDS.items():
            value = entry.get(field)
            if value is not None and not isinstance(value, vartypes):
                raise ConfigError(
                    f"Type error for field '{field}' in key '{key}': "
                    f"'{value}' is a '{type(value).__name__}', expected "
                    f"""{" or ".join([f"'{t.__name__}'" for t in vartypes])}."""
                )

        if "type" not in entry:
            raise ConfigError(f"'type' field missing for key '{key}'.")
        if entry["type"] not in self._CONV_MAP:
            raise ConfigError(f"Type '{entry['type']}' unrecognized for key '{key}'.")

        self._vartype: str = entry["type"]
        self._conv_func = self._CONV_MAP[self._vartype]
        self._required: bool = entry.get("required", False)
        self._default: Any = entry.get("default")
        self._comment: Optional[str] = entry.get("comment")
        self._min: Optional[int | float] = entry.get("min")
        self._max: Optional[int | float] = entry.get("max")
        self._enum: Optional[list[Any]] = entry.get("enum")

    @property
    def default(self) -> str:
        """
        Returns:
            str: Default value as written in the .ini file.
        """
        return _default_to_str(self._default, self._vartype)

    @property
    def comment(self) -> Optional[str]:
        return self._comment

    def check_and_convert(self, value: str) -> ConversionResult:
        """
        Convert the raw value to its declared type and check the schema
        rules.

        Args:
            value (str): Raw value from the .ini file.

        Returns:
            ConversionResult: Converted value or error description.
        """
        if not value:
            if self._required:
                return ConversionResult(True, "value is required", None)
            # Value is missing and it's allowed
            return ConversionResult(False, None, None)

        try:
            converted = self._conv_func(value)
        except ValueError:
            return ConversionResult(
                True, f"'{value}' is not a valid '{self._vartype}'", None
            )

        if isinstance(converted, (int, float)) and not isinstance(converted, bool):
            if self._min is not None and converted < self._min:
                return ConversionResult(
                    True, f"{converted} is lower than {self._min}", None
                )
            if self._max is not None and converted > self._max:
                return ConversionResult(
                    True, f"{converted} is greater than {self._max}", None
                )

        if self._enum is not None and converted not in self._enum:
            return ConversionResult(
                True,
                f"'{value}' is not one of {', '.join(map(str, self._enum))}",
                None,
            )

        return ConversionResult(False, None, converted)


########################################################################
#                  Configuration parser and validator                  #
########################################################################


class ConfigParser:
    """
    Load a configuration file in the `.ini` format and validate it
    against a schema file in the `.json` format. The converted values
    are available through a read-only view.
    """

    def __init__(
        self,
        schema: str | Path | TextIO,
        config: Optional[str | Path | TextIO] = None,
        name: Optional[str] = None,
        gen_default: bool = True,
    ):
        """
        Load the schema and, if given, the configuration.

        When the configuration is given as a path and no file exists at
        this path, a default configuration is generated from the schema.

        Args:
            schema (str | Path | TextIO): Schema file path or opened
                file-like object.
            config (str | Path | TextIO | None): Configuration file path,
                opened file-like object or `None` to only load the
                schema.
            name (Optional[str]): Name of the configuration in messages.
                Defaults to the file name, mandatory for file-like
                objects.
            gen_default (bool): Generate a default configuration file if
                the path doesn't exist.

        Raises:
            ConfigError: Any error related to data parsing, validation,
                etc.
        """
        self._schema: dict[str, dict[str, _SchemaEntry]] = {}
        self._data: dict[str, dict[str, Any]] = {}

        if name:
            self._name = name
        elif isinstance(config, (str, Path)):
            self._name = Path(config).name
        else:
            raise ConfigError("A configuration name is required.")

        self.__load_schema(schema)

        if gen_default and isinstance(config, (str, Path)) and not Path(config).exists():
            try:
                with open(config, "x+", encoding="utf-8") as file:
                    self.generate_default(file)

            except Exception as e:
                raise ConfigError(
                    "Error generating the default configuration file "
                    f"for '{self._name}'."
                ) from e

            logger.info(f"Initial configuration file setup under '{config}'.")

        if config:
            self.load_and_check_config(config)

    def __load_schema(self, source: str | Path | TextIO):
        """
        Load the schema file and populate `self._schema`.

        Raises:
            ConfigError: Wrap any exception that may occur during json
                file opening and parsing.
        """
        try:
            if isinstance(source, (str, Path)):
                with open(source, "r", encoding="utf-8") as file:
                    schema = json.load(file)
            else:
                schema = json.load(source)

        except FileNotFoundError:
            raise ConfigError(f"Schema file not found for '{self._name}'.")
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Schema parsing error occurred for '{self._name}'."
            ) from e
        except OSError as e:
            raise ConfigError(f"OS error occurred opening '{self._name}'.") from e

        for section, keys in schema.items():
            self._schema[section] = {
                key: _SchemaEntry(key, entry) for key, entry in keys.items()
            }

    def load_and_check_config(self, source: str | Path | TextIO):
        """
        Load the given configuration and validate it against the schema.

        Args:
            source (str | Path | TextIO): Configuration file path or
                opened file-like object.

        Raises:
            ConfigError: The file cannot be read or is invalid.
        """
        config = configparser.ConfigParser(interpolation=None)
        try:
            if isinstance(source, (str, Path)):
                with open(source, encoding="utf-8") as file:
                    config.read_file(file)
            else:
                config.read_file(source)

        except configparser.Error as e:
            raise ConfigError(
                f"A parsing exception occurred opening '{self._name}'."
            ) from e
        except OSError as e:
            raise ConfigError(f"An error occurred reading '{self._name}'.") from e

        self._data = self.__validate(config)

    def generate_default(self, stream: TextIO, annotate: bool = True):
        """
        Write a default configuration inferred from the schema.

        Args:
            stream (TextIO): Stream to write the configuration into.
            annotate (bool): Write the schema comments above the keys.
        """
        for index, (section, entries) in enumerate(self._schema.items()):
            if index:
                stream.write("\n")
            stream.write(f"[{section}]\n")
            for key, entry in entries.items():
                if annotate and entry.comment:
                    stream.write(f"; {entry.comment}\n")
                stream.write(f"{key} = {entry.default}\n")

    def __validate(self, config: configparser.ConfigParser) -> dict[str, dict[str, Any]]:
        """
        Validate the loaded configuration and convert its values.

        Returns:
            dict[str, dict[str, Any]]: Converted values by section.

        Raises:
            ConfigError: Sections or keys differ from the schema, or a
                value breaks a rule.
        """
        diff = self.__compare(self._schema.keys(), config.sections())
        if diff:
            raise ConfigError(
                f"'{self._name}' sections differ from model: {', '.join(diff)}."
            )

        data: dict[str, dict[str, Any]] = {}
        for section, entries in self._schema.items():
            diff = self.__compare(entries.keys(), config[section].keys())
            if diff:
                raise ConfigError(
                    f"'{self._name}' section [{section}] differs from model: "
                    f"{', '.join(diff)}."
                )

            data[section] = {}
            for key, entry in entries.items():
                result = entry.check_and_convert(config[section][key])
                if result.error:
                    raise ConfigError(
                        f"Value for key '{key}' in section '{section}' is invalid: "
                        f"{result.message}."
                    )
                data[section][key] = result.value

        return data

    def __compare(self, model: Iterable[str], config: Iterable[str]) -> list[str]:
        """
        Returns:
            list[str]: Missing (-) and unexpected (+) names.
        """
        model = set(model)
        config = set(config)
        missing = [f"-{e}" for e in sorted(model - config)]
        extra = [f"+{e}" for e in sorted(config - model)]
        return missing + extra

    def get_view(self) -> MappingProxyType[str, MappingProxyType[str, Any]]:
        """
        Returns:
            MappingProxyType: A read-only dictionary on configuration
                data.
        """
        return MappingProxyType(
            {
                section: MappingProxyType(dict(values))
                for section, values in self._data.items()
            }
        )
