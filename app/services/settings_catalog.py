"""Static catalog of the settings a project can configure.

The catalog is plain data: every definition carries its validation as a
``NoValidation`` / ``PatternValidation`` / ``PredicateValidation`` variant,
and predicates are looked up by name in :data:`PREDICATES`. Building the
catalog never touches the database; only the default executions folder is
probed once on disk.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Callable, Mapping
from urllib.parse import urlparse

from app.core.logging import logger
from app.schemas.setting import (
    NoValidation,
    PatternValidation,
    PredicateValidation,
    SettingDefinition,
    SettingGroup,
    SettingOption,
    SettingType,
)
from app.services.defect_adapters import DEFECT_ADAPTERS, EG_QUOTE, get_adapter
from core.settings import get_settings

PROJECT_VARIABLE = "{{project}}"
BRANCH_VARIABLE = "{{branch}}"
CYCLE_VARIABLE = "{{cycle}}"
DEFAULT_EXECUTION_VARIABLES = f"{PROJECT_VARIABLE}/{BRANCH_VARIABLE}/{CYCLE_VARIABLE}"

EXECUTION_INDEXER_FILE_EXECUTION_BASE_PATH = "executionIndexer.file.executionBasePath"
EXECUTION_INDEXER_FILE_CYCLE_DEFINITION_PATH = "executionIndexer.file.cycleDefinitionPath"
EXECUTION_INDEXER_FILE_BUILD_INFORMATION_PATH = "executionIndexer.file.buildInformationPath"
EXECUTION_INDEXER_FILE_DELETE_AFTER_INDEXING_AS_DONE = (
    "executionIndexer.file.deleteAfterIndexingAsDone"
)

EMAIL_FROM = "email.from"
EMAIL_TO_EXECUTION_CRASHED = "email.to.execution.crashed"
EMAIL_TO_EXECUTION_RAN = "email.to.execution.ran"
EMAIL_TO_EXECUTION_ELIGIBLE_PASSED = "email.to.execution.eligible.passed"
EMAIL_TO_EXECUTION_ELIGIBLE_WARNING = "email.to.execution.eligible.warning"
EMAIL_TO_EXECUTION_NOT_ELIGIBLE = "email.to.execution.not.eligible"

DEFECT_INDEXER = "defect.indexer"
DEFECT_URL_FORMAT = "defect.urlFormat"
DEFECT_ID_PLACEHOLDER = "{{id}}"

GROUP_EXECUTION_INDEXING = "Execution Indexing"
GROUP_EMAIL_REPORTS = "Email Reports"
GROUP_DEFECTS = "Defects"

_HOME_EXECUTIONS_FOLDER = Path.home() / "ara-data" / "executions"


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


PREDICATES: dict[str, Callable[[str], bool]] = {
    "absolute_url": _is_absolute_url,
}


def check_validation(definition: SettingDefinition, value: str | None) -> str | None:
    """Run the validation variant of a definition.

    Empty values are accepted here; requiredness is checked by the caller.

    Returns:
        ``None`` when the value is accepted, otherwise the error message.
    """

    validation = definition.validation
    if not value or isinstance(validation, NoValidation):
        return None
    if isinstance(validation, PatternValidation):
        return None if re.search(validation.pattern, value) else validation.message
    predicate = PREDICATES[validation.predicate]
    return None if predicate(value) else validation.message


def _probe_writable(folder: Path) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    probe = folder / "writing-test"
    # Left over by a process killed before it could clean up
    probe.unlink(missing_ok=True)
    probe.touch()
    probe.unlink()


@lru_cache(maxsize=1)
def default_executions_folder() -> str:
    """Folder where executions are stored by default, with a trailing separator.

    Uses the configured folder when it can be created and written to,
    otherwise ``~/ara-data/executions/``. Computed once per process.
    """

    configured = get_settings().executions_folder
    try:
        _probe_writable(Path(configured))
        return configured if configured.endswith("/") else configured + "/"
    except OSError:
        fallback = str(_HOME_EXECUTIONS_FOLDER) + "/"
        logger.warning(
            "Cannot create or write to the default executions directory: "
            "using %s as the default folder to store executions instead of %s",
            fallback,
            configured,
            exc_info=True,
        )
        return fallback


def execution_indexing_definitions() -> list[SettingDefinition]:
    base_path = default_executions_folder() + DEFAULT_EXECUTION_VARIABLES
    cycle_definition_path = "/cycleDefinition.json"
    build_information_path = "buildInformation.json"
    return [
        SettingDefinition(
            code=EXECUTION_INDEXER_FILE_EXECUTION_BASE_PATH,
            name="Execution base path",
            type=SettingType.STRING,
            required=True,
            default_value=base_path,
            help=(
                "The root path of all jobs for a given branch and cycle. "
                "Optional variables you can use in this configuration: "
                f"{PROJECT_VARIABLE} is the code of the project for the given execution, "
                f"{BRANCH_VARIABLE} is the name of the branch for the given execution, "
                f"{CYCLE_VARIABLE} is the name of the given execution. "
                f'{EG_QUOTE}{base_path}" (on Linux) '
                f'or "C:/ara/data/executions/{DEFAULT_EXECUTION_VARIABLES}" (on Windows)'
            ),
        ),
        SettingDefinition(
            code=EXECUTION_INDEXER_FILE_CYCLE_DEFINITION_PATH,
            name="Cycle definition path",
            type=SettingType.STRING,
            required=True,
            default_value=cycle_definition_path,
            help=(
                "Cycle definition are extracted from this path. "
                f'{EG_QUOTE}{cycle_definition_path}", appended to the run\'s job folder.'
            ),
        ),
        SettingDefinition(
            code=EXECUTION_INDEXER_FILE_BUILD_INFORMATION_PATH,
            name="Build information path",
            type=SettingType.STRING,
            required=True,
            default_value=build_information_path,
            help=(
                "Build information are extracted from this path. "
                f'{EG_QUOTE}{build_information_path}", appended to EITHER the '
                "execution's jobUrl OR to the run's jobUrl. It is used to complete builds "
                "to index when the hierarchy of all deployment and NRT jobs is generated."
            ),
        ),
        SettingDefinition(
            code=EXECUTION_INDEXER_FILE_DELETE_AFTER_INDEXING_AS_DONE,
            name="Delete after indexing as done",
            type=SettingType.BOOLEAN,
            default_value="true",
            help=(
                "After an execution is not running anymore and is fully indexed, "
                "remove the folder on the file system if checked. "
                "Disable it only temporarily to debug what is received: "
                "big Postman and Cucumber reports quickly fill the disk."
            ),
        ),
    ]


def email_reports_definitions() -> list[SettingDefinition]:
    receivers = (
        'The receiver email address (or addresses, separated by commas (",")) '
        "for an execution "
    )
    no_email = "No email will be sent if the setting is not provided."
    to_settings = [
        (
            EMAIL_TO_EXECUTION_CRASHED,
            "To, on crash",
            "without cycleDefinition.json, so we do not know what tests are expected "
            "to run for the given cycle. ",
            "Technical Leader <technical-leader@company.com>",
        ),
        (
            EMAIL_TO_EXECUTION_RAN,
            "To, on ran",
            "that ran but is not set to block the workflow on failure, only run test "
            "for information. ",
            "Project Leader <project-leader@company.com>",
        ),
        (
            EMAIL_TO_EXECUTION_ELIGIBLE_PASSED,
            "To, on eligible and passed",
            "that is set to block workflow on failure, and with a quality-status of PASSED ",
            "Project Team <project@lists.company.com>",
        ),
        (
            EMAIL_TO_EXECUTION_ELIGIBLE_WARNING,
            "To, on eligible but warning",
            "that is set to block workflow on failure, and with a quality-status of WARNING ",
            "Project Team <project@lists.company.com>",
        ),
        (
            EMAIL_TO_EXECUTION_NOT_ELIGIBLE,
            "To, on not eligible",
            "that is set to block workflow on failure, and with a quality-status of "
            "INCOMPLETE or FAILED ",
            "Project Team <project@lists.company.com>, Project Leader <leader@company.com>",
        ),
    ]
    definitions = [
        SettingDefinition(
            code=EMAIL_FROM,
            name="From",
            type=SettingType.STRING,
            required=True,
            help=(
                "The email address (with an optional name) from which to send reports "
                "once a new execution is finished. "
                f'{EG_QUOTE}ARA for Project X <project-x@technical.company.com>" '
                'or just "project-x@technical.company.com".'
            ),
        )
    ]
    for code, name, when, example in to_settings:
        definitions.append(
            SettingDefinition(
                code=code,
                name=name,
                type=SettingType.STRING,
                required=False,
                help=f'{receivers}{when}{EG_QUOTE}{example}". {no_email}',
            )
        )
    return definitions


def defect_definitions(project_values: Mapping[str, str | None] | None) -> list[SettingDefinition]:
    """Definitions of the "Defects" group.

    The URL format and the adapter settings only appear once the project has
    selected a defect adapter.
    """

    definitions = [
        SettingDefinition(
            code=DEFECT_INDEXER,
            name="System",
            type=SettingType.SELECT,
            required=False,
            options=[SettingOption(value="", label="")]
            + [SettingOption(value=a.code, label=a.name) for a in DEFECT_ADAPTERS],
            help=(
                "Define the system used to store and manage defects, in order to update "
                "problem statuses with the defect statuses from this provider. "
                "If none is provided, problem's defects will not be linked: "
                "users will have to open/close them manually."
            ),
        )
    ]
    if not project_values:
        return definitions

    adapter = get_adapter(project_values.get(DEFECT_INDEXER))
    if adapter is None:
        return definitions

    definitions.append(
        SettingDefinition(
            code=DEFECT_URL_FORMAT,
            name="URL format",
            type=SettingType.STRING,
            required=False,
            validation=PatternValidation(
                pattern=re.escape(DEFECT_ID_PLACEHOLDER),
                message=f'The "{DEFECT_ID_PLACEHOLDER}" placeholder is required.',
            ),
            help=(
                "Problems can be assigned a defect ID: the URL format is used to construct "
                "the link for users to view properties of the defect. "
                f'The "{DEFECT_ID_PLACEHOLDER}" placeholder is used to place the defect ID '
                'in the constructed URL. Eg. for a defect ID "PROJECT-42" and an URL format '
                '"http://bugtracker.company.com/issues/{{id}}", the ID will link to '
                '"http://bugtracker.company.com/issues/PROJECT-42". '
                "If the URL format is not defined, defect IDs will not be links."
            ),
        )
    )
    definitions.extend(adapter.setting_definitions())
    return definitions


def get_definitions(
    project_values: Mapping[str, str | None] | None = None,
) -> list[SettingGroup]:
    """Return the settings tree for a project.

    Args:
        project_values: Stored settings of the project, by code. They decide
            which conditional settings are present; they are not copied into
            the definitions.

    Returns:
        The groups, in display order.
    """

    return [
        SettingGroup(name=GROUP_EXECUTION_INDEXING, settings=execution_indexing_definitions()),
        SettingGroup(name=GROUP_EMAIL_REPORTS, settings=email_reports_definitions()),
        SettingGroup(name=GROUP_DEFECTS, settings=defect_definitions(project_values)),
    ]


def find_definition(
    groups: list[SettingGroup], code: str
) -> SettingDefinition | None:
    for group in groups:
        for definition in group.settings:
            if definition.code == code:
                return definition
    return None
