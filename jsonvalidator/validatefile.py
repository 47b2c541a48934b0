"""Validates JSON instance files against a schema file.

Instance files may hold a single JSON value, a JSON array of instances, or
JSON Lines.
"""

import json
import logging
import sys
from typing import Any, List, Optional, Tuple

from jsonvalidator.helpers import ValidationResult
from jsonvalidator.validator import Validator, ValidatorOptions

logger = logging.getLogger(__name__)


def load_json_file(path: str) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_instances(instance_file: str, schema: Any) -> List[Tuple[str, Any]]:
    """Loads the instances of a file, labelled for reporting.

    Args:
        instance_file: Path to a JSON file (single value, array, or JSONL)
        schema: The schema; a root array schema means an array file is one instance

    Returns:
        List of (label, instance) pairs
    """
    with open(instance_file, 'r', encoding='utf-8') as f:
        content = f.read().strip()

    schema_is_array = isinstance(schema, dict) and schema.get('type') == 'array'

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        instances = []
        for i, line in enumerate(content.split('\n')):
            line = line.strip()
            if not line:
                continue
            try:
                instances.append((f"{instance_file}:{i + 1}", json.loads(line)))
            except json.JSONDecodeError as e:
                raise ValueError(f"{instance_file}:{i + 1}: not valid JSON: {e.msg}") from e
        return instances

    if isinstance(data, list) and not schema_is_array:
        return [(f"{instance_file}[{i}]", item) for i, item in enumerate(data)]
    return [(instance_file, data)]


def validate_file(
    instance_file: str,
    schema_file: str,
    validator: Optional[Validator] = None,
    options: Optional[ValidatorOptions] = None
) -> List[Tuple[str, ValidationResult]]:
    """Validates the instances of a JSON file against a schema file.

    Args:
        instance_file: Path to JSON file (single object, array, or JSONL)
        schema_file: Path to the schema file
        validator: Validator to use; a new one is created if not provided
        options: Options for each validation call

    Returns:
        List of (label, ValidationResult) for each instance in the file
    """
    schema = load_json_file(schema_file)
    validator = validator or Validator()
    results = []
    for label, instance in load_instances(instance_file, schema):
        results.append((label, validator.validate(instance, schema, options)))
    return results


def validate_json_instances(
    input_files: List[str],
    schema_file: str,
    options: Optional[ValidatorOptions] = None,
    verbose: bool = False
) -> Tuple[int, int]:
    """Validates multiple JSON instance files against a schema.

    Args:
        input_files: List of JSON file paths to validate
        schema_file: Path to schema file
        options: Options for each validation call
        verbose: Whether to print validation results

    Returns:
        Tuple of (valid_count, invalid_count)
    """
    validator = Validator()
    valid_count = 0
    invalid_count = 0

    for input_file in input_files:
        for label, result in validate_file(input_file, schema_file, validator, options):
            if result.valid:
                valid_count += 1
            else:
                invalid_count += 1
                logger.debug("%s failed with %d error(s)", label, len(result.errors))
            if verbose:
                print(f"{label}: {result}")

    return valid_count, invalid_count


# Command entry point for the jsonvalidator CLI
def validate(
    input: List[str],
    schema: str,
    quiet: bool = False,
    options: Optional[ValidatorOptions] = None
) -> None:
    """Validates JSON instance files against a schema file.

    Args:
        input: List of JSON files to validate
        schema: Path to the schema file
        quiet: Suppress output, exit with code 0 if valid, 1 if invalid
        options: Options for each validation call
    """
    valid_count, invalid_count = validate_json_instances(
        input_files=input,
        schema_file=schema,
        options=options,
        verbose=not quiet
    )

    if not quiet:
        total = valid_count + invalid_count
        print(f"\nValidation summary: {valid_count}/{total} instances valid")

    if invalid_count > 0:
        sys.exit(1)
