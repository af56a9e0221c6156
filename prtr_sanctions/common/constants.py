"""Application constants."""

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36"
)
PENALTY_API_URL = "https://prtr.moenv.gov.tw/api/v1/Penalty"
PENALTY_REFERER = "https://prtr.moenv.gov.tw/sanctions.html"
DEFAULT_HEADERS = {
    "accept": "application/json",
    "accept-language": "zh-TW,zh;q=0.9,en-US;q=0.8,en;q=0.7",
    "cache-control": "no-cache",
    "pragma": "no-cache",
    "referer": PENALTY_REFERER,
    "x-requested-with": "XMLHttpRequest",
}
DEFAULT_QUERY_PARAMS = {
    "UniformNo": "",
    "FacilityName": "",
    "County": "",
    "PenaltyAgencyList": "",
    "Regulations": "",
    "Law": "",
    "RegistrationNo": "",
    "PageNumber": 1,
    "PageSize": -1,
}

LOCAL_TIMEZONE = "Asia/Taipei"
# Minguo (ROC) calendar: Gregorian year = local year + 1911.
ROC_YEAR_OFFSET = 1911
CREATED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_DOCS_DIR = "docs/sanctions"

MODES = ("range", "backfill", "daily")
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "run_id",
    "stage",
    "period",
    "event",
    "status",
    "unique_id",
    "path",
    "records_in",
    "records_saved",
    "error_count",
    "duration_ms",
    "error_code",
    "message",
)
