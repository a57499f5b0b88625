"""
Attendance code vocabulary: code -> points, readable labels for notices, code groups.
Codes are case-sensitive exactly as they appear in the log sheet.
"""
from typing import Dict, Optional, Tuple

NS_C = "NS/C"
NS_LC = "NS/LC"
NS_NC = "NS/NC"
NS_S = "NS/S"
NS_LS = "NS/LS"
WO = "WO"
WO_HOST = "WO Host"
PRELIM = "Prelim"

# Legacy counters: carried in summary aggregates, never produced by the classifier
COUPON = "Coupon"
BREAK = "break"

CODE_POINTS: Dict[str, int] = {
    NS_C: 1,
    NS_LC: 2,
    NS_NC: 3,
    NS_S: 0,
    NS_LS: 1,
    WO: -1,
    WO_HOST: -1,
    PRELIM: 0,
}

CODE_LABELS: Dict[str, str] = {
    NS_C: "No Show / Called Out (48+ hours notice)",
    NS_LC: "No Show / Late Call Out (less than 48 hours notice)",
    NS_NC: "No Show / No Call",
    NS_S: "No Show / Sick",
    NS_LS: "No Show / Late Sick Call (less than 2 hours notice)",
    WO: "Work Off",
    WO_HOST: "Work Off (Host/Door shift)",
    PRELIM: "Prelim / Final exam (excused)",
}

# Grid-log tokens
INFRACTION_CODES: Tuple[str, ...] = (NS_C, NS_LC, NS_NC, NS_S, NS_LS)
WORK_OFF_CODES: Tuple[str, ...] = (WO, WO_HOST)

# Infractions a work-off can cancel
MAKEUP_ELIGIBLE_CODES: Tuple[str, ...] = (NS_C, NS_LC, NS_NC)

# Summary sheet counters, in column order after the name column
SUMMARY_CODES: Tuple[str, ...] = (
    NS_C, NS_LC, NS_NC, NS_S, NS_LS, WO, WO_HOST, PRELIM, COUPON, BREAK,
)


def points_for(code: str) -> int:
    return CODE_POINTS.get(code, 0)


def label_for(code: str) -> str:
    return CODE_LABELS.get(code, code)


def match_token(cell: str) -> Optional[str]:
    """Exact (case-sensitive) code for a grid cell, or None if the cell holds anything else."""
    token = (cell or "").strip()
    if token in INFRACTION_CODES or token in WORK_OFF_CODES:
        return token
    return None
