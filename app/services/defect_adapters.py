"""Registry of the defect trackers a project can be linked to.

An adapter only contributes its code, display name and setting definitions
here; the catalog shows those definitions once a project selects the adapter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from app.schemas.setting import PredicateValidation, SettingDefinition, SettingType

EG_QUOTE = 'Eg. "'
THE_LIST_IS_CASE_INSENSITIVE = "The list is case insensitive. "

DEFECT_RTC_ROOT_URL = "defect.rtc.rootUrl"
DEFECT_RTC_PRE_AUTHENTICATE_PATH = "defect.rtc.preAuthenticatePath"
DEFECT_RTC_AUTHENTICATE_PATH = "defect.rtc.authenticatePath"
DEFECT_RTC_WORK_ITEM_RESOURCE_PATH = "defect.rtc.workItemResourcePath"
DEFECT_RTC_USERNAME = "defect.rtc.username"
DEFECT_RTC_PASSWORD = "defect.rtc.password"
DEFECT_RTC_BATCH_SIZE = "defect.rtc.batchSize"
DEFECT_RTC_WORK_ITEM_TYPES = "defect.rtc.workItemTypes"
DEFECT_RTC_CLOSED_STATES = "defect.rtc.closedStates"
DEFECT_RTC_OPEN_STATES = "defect.rtc.openStates"

DEFECT_GITHUB_OWNER = "defect.github.owner"
DEFECT_GITHUB_REPONAME = "defect.github.repositoryName"
DEFECT_GITHUB_TOKEN = "defect.github.token"


@dataclass(frozen=True)
class DefectAdapter:
    code: str
    name: str
    setting_definitions: Callable[[], list[SettingDefinition]]


def _rtc_state_help(kind: str, default: str) -> str:
    return (
        "List of case-insensitive RTC states for RTC defects, tasks and issues whose identifiers "
        "will be used in ARA problems, and whose problems should be considered as "
        f"{kind}. States are separated with commas (\",\"). "
        + EG_QUOTE
        + default
        + '". '
        + THE_LIST_IS_CASE_INSENSITIVE
        + "If a state is configured to be considered both CLOSED and OPEN, CLOSED wins, "
        "with a warning in logs. "
        "If a state is not configured, it will be considered OPEN, with a warning in logs."
    )


def rtc_definitions() -> list[SettingDefinition]:
    pre_authenticate_path = "/authenticated/identity"
    authenticate_path = "/authenticated/j_security_check"
    work_item_resource_path = "/rpt/repository/workitem/"
    work_item_types = "Defect,Issue,Task"
    closed_states = "Closed,Done,Invalid,Resolved,Verified"
    open_states = (
        "Blocked,New,In progress,Deploy ready,Reopened,Test ready,Triaged,"
        "Waiting for info,Waiting for review"
    )
    return [
        SettingDefinition(
            code=DEFECT_RTC_ROOT_URL,
            name="Root URL",
            type=SettingType.STRING,
            required=True,
            validation=PredicateValidation(
                predicate="absolute_url",
                message="The root URL must start with http:// or https:// and have a host.",
            ),
            help=(
                "Root URL of RTC to query work-item statuses: includes protocol, "
                "domain and port, but NO path. "
                + EG_QUOTE
                + 'https://rtc.my-company.com/ccm".'
            ),
        ),
        SettingDefinition(
            code=DEFECT_RTC_PRE_AUTHENTICATE_PATH,
            name="Pre-authenticate path",
            type=SettingType.STRING,
            required=True,
            default_value=pre_authenticate_path,
            help=(
                "Path (to be appended to the root URL) of the page to query (GET) "
                "before and after authentication. " + EG_QUOTE + pre_authenticate_path + '"'
            ),
        ),
        SettingDefinition(
            code=DEFECT_RTC_AUTHENTICATE_PATH,
            name="Authenticate path",
            type=SettingType.STRING,
            required=True,
            default_value=authenticate_path,
            help=(
                "Path (to be appended to the root URL) of the Ajax URL to query (POST) "
                "to send authentication credentials. " + EG_QUOTE + authenticate_path + '"'
            ),
        ),
        SettingDefinition(
            code=DEFECT_RTC_WORK_ITEM_RESOURCE_PATH,
            name="Work-item resource path",
            type=SettingType.STRING,
            required=True,
            default_value=work_item_resource_path,
            help=(
                "Path (to be appended to the root path) of the URL to query all "
                "work-items (filters query will be appended). "
                + EG_QUOTE
                + work_item_resource_path
                + '"'
            ),
        ),
        SettingDefinition(
            code=DEFECT_RTC_USERNAME,
            name="Username",
            type=SettingType.STRING,
            required=True,
            help="Username to authenticate to RTC (only read actions will be done).",
        ),
        SettingDefinition(
            code=DEFECT_RTC_PASSWORD,
            name="Password",
            type=SettingType.PASSWORD,
            required=True,
            help="Password to authenticate to RTC (only read actions will be done).",
        ),
        SettingDefinition(
            code=DEFECT_RTC_BATCH_SIZE,
            name="Batch size",
            type=SettingType.INT,
            required=True,
            default_value="100",
            help=(
                "Number of batched work-items to request at once per HTTP request to RTC. "
                "Will be used to form a filter passed in URL (resulting URL should not be "
                "longer than 2000 characters for interoperability) and as page size when "
                "requesting recently modified items."
            ),
        ),
        SettingDefinition(
            code=DEFECT_RTC_WORK_ITEM_TYPES,
            name="Work-item types",
            type=SettingType.STRING,
            required=True,
            default_value=work_item_types,
            help=(
                "All RTC work-item types to support (and watch) for problem defect "
                "assignation. "
                + THE_LIST_IS_CASE_INSENSITIVE
                + EG_QUOTE
                + work_item_types
                + '"'
            ),
        ),
        SettingDefinition(
            code=DEFECT_RTC_CLOSED_STATES,
            name="Closed states",
            type=SettingType.STRING,
            required=True,
            default_value=closed_states,
            help=_rtc_state_help("CLOSED", closed_states),
        ),
        SettingDefinition(
            code=DEFECT_RTC_OPEN_STATES,
            name="Open states",
            type=SettingType.STRING,
            required=True,
            default_value=open_states,
            help=_rtc_state_help("OPEN", open_states),
        ),
    ]


def github_definitions() -> list[SettingDefinition]:
    return [
        SettingDefinition(
            code=DEFECT_GITHUB_OWNER,
            name="Github Repository's owner",
            type=SettingType.STRING,
            required=True,
            help=(
                "The owner of this project's Github repository. Usually the user or "
                "organization which holds the repository."
            ),
        ),
        SettingDefinition(
            code=DEFECT_GITHUB_REPONAME,
            name="Github Repository's name",
            type=SettingType.STRING,
            required=True,
            help="The name of this project's Github repository.",
        ),
        SettingDefinition(
            code=DEFECT_GITHUB_TOKEN,
            name="Authorization token",
            type=SettingType.PASSWORD,
            required=False,
            help=(
                "If your project's repository is a private one, you need to put here the "
                "personal token of a user authorized to read the repository. "
                "To create a personal access token, on Github, go to the Settings page of "
                "your account, then click on the 'Developer settings' menu and click on the "
                "'Personal Access Token' menu item. In this page, generate a new token "
                "(enable sso if your organization use it), and copy the Authorization "
                "token displayed in this field."
            ),
        ),
    ]


DEFECT_ADAPTERS: tuple[DefectAdapter, ...] = (
    DefectAdapter(code="rtc", name="IBM Rational Team Concert", setting_definitions=rtc_definitions),
    DefectAdapter(code="github", name="GitHub", setting_definitions=github_definitions),
)


def get_adapter(code: str | None) -> DefectAdapter | None:
    return next((a for a in DEFECT_ADAPTERS if a.code == code), None)
