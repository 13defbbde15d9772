# app.py: Accessibility Auditor front end (form -> backend /api/audit -> PDF download)
# Run: python server.py & python3 -m streamlit run app.py
from __future__ import annotations

import os
from typing import Dict, Optional, Tuple

import requests
import streamlit as st

from utils import normalize_url, safe_filename

# =========================
# Config
# =========================
API_URL = os.getenv("AUDIT_API_URL", "http://localhost:5000").rstrip("/")
REQUEST_TIMEOUT = int(os.getenv("AUDIT_REQUEST_TIMEOUT", "300"))
PRIMARY = os.getenv("BRAND_PRIMARY", "#0F4C81")
APP_NAME = os.getenv("BRAND_NAME", "Accessibility Auditor")


def request_audit(url: str, name: str) -> Tuple[Optional[Dict], Optional[str]]:
    """Returns (payload, error)."""
    try:
        r = requests.post(f"{API_URL}/api/audit", json={"url": url, "name": name}, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        return None, f"Backend not reachable: {e}"
    try:
        data = r.json()
    except ValueError:
        return None, f"Unexpected response from backend (HTTP {r.status_code})"
    if r.status_code != 200:
        return None, data.get("error") or f"HTTP {r.status_code}"
    return data, None


def fetch_report(report_url: str) -> Tuple[Optional[bytes], Optional[str]]:
    try:
        r = requests.get(report_url, timeout=60)
        r.raise_for_status()
    except requests.RequestException as e:
        return None, f"Could not download report: {e}"
    return r.content, None


# -----------------------------
# UI
# -----------------------------
st.set_page_config(page_title=APP_NAME, page_icon="✅", layout="centered")
st.markdown(f"""
<style>
#MainMenu{{visibility:hidden}} footer{{visibility:hidden}}
.stButton > button, .stDownloadButton > button {{ background:{PRIMARY}; color:#fff; border:none; border-radius:999px; padding:8px 14px; font-weight:700; }}
</style>
""", unsafe_allow_html=True)

st.title("Accessibility Audit Tool")
st.caption("Runs axe-core and Lighthouse against a page and returns a PDF report.")

if "report" not in st.session_state: st.session_state["report"] = None

url = st.text_input("Enter URL:", placeholder="Enter URL", key="url")
name = st.text_input("Enter Your Name:", placeholder="Enter Your Name", key="name")

if st.button("Audit Website", use_container_width=True, key="btn_audit"):
    st.session_state["report"] = None
    if not url.strip() or not name.strip():
        st.warning("URL and name are required.")
    else:
        with st.spinner("Auditing..."):
            data, err = request_audit(normalize_url(url), name.strip())
        if err:
            st.error(err)
        else:
            st.session_state["report"] = data

report = st.session_state.get("report")
if report:
    st.success(f"{report.get('verdict', 'Done')}: score {report.get('score', 0) * 100:.0f} / 100, "
               f"{report.get('violations', 0)} violation(s).")
    st.markdown(f"[Open report]({report['reportUrl']})")
    pdf, err = fetch_report(report["reportUrl"])
    if pdf:
        st.download_button("Download Report", data=pdf, mime="application/pdf",
                           file_name=f"accessibility_report_{safe_filename(name)}.pdf",
                           use_container_width=True)
    else:
        st.caption(err)
