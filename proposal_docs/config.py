from __future__ import annotations

from pathlib import Path
from typing import List
import json


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "proposals.db"
STYLE_PRESET_PATH = Path(__file__).resolve().parent / "assets" / "style_preset.json"

# Scope-of-services document: fixed number of service rows per page.
SERVICES_PER_PAGE = 8

DEFAULT_LOCALE = "en-IN"
DEFAULT_CURRENCY = "INR"

DEFAULT_CLIENT_NAME = "Client Name"
DEFAULT_CIN = "Not Provided"
DEFAULT_ADDRESS = "Address Not Provided"
DEFAULT_MESSAGE = (
    "We are pleased to submit our proposal for providing professional services to your "
    "esteemed organization. Please find below the scope of work along with professional "
    "fees and terms and conditions."
)

ADDRESSEE = "The Board of Directors"
SUBJECT_LINE = (
    "Sub.: Scope of Work Offered along with Professional Fees and Terms and Conditions of appointment"
)
SALUTATION = "Sir,"
PRICE_PLACEHOLDER = "-"

FEE_TABLE_HEADERS: List[str] = ["Services", "Professional Fees", "Personalised Fees"]

TERMS_TITLE = "Other Terms and Conditions:"
TERMS: List[str] = [
    "GST as per applicable rate will be extra. Presently GST rate is 18%.",
    "All out of pocket expenses shall be reimbursed on actual basis. E.g. ROC Fees, Income Tax, "
    "Travel and Conveyance for performing auditing at your office etc.",
    "Your Company should maintain proper books of accounts, vouchers, bills, and files and provide "
    "the same to us on timely manner to enable us to complete the auditing within the prescribed time.",
    "Company shall also agree and accept to general terms and conditions of Mayur and Company "
    "attached herewith.",
]
ACCEPTANCE_NOTE = "Please send us signed and stamped copy of this letter as a token of your acceptance."

SIGNATORY_LINES: List[str] = [
    "CA MAYUR GUPTA, FCA",
    "PROPRIETOR",
    "FOR MAYUR AND COMPANY",
    "CHARTERED ACCOUNTANTS",
]
SIGNATURE_TRAILER: List[str] = [
    "PLACE: DELHI",
    "M.NO.503036",
    "FRN-021448N",
]
ENCLOSURE = "Enc.: a/a"

SERVICES_HEADER = "Scope of Service"
SERVICES_SIDE_TITLE = "Proposed Services"


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "proposals.db"
