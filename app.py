import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.charts import bar_chart, radar_chart
from core.config import EngineConfig, normalize_config
from core.data import get_source_files, load_dashboard_data, prepare_context
from core.geometry import bar_geometry, radar_geometry
from core.profile import compute_profile
from core.skills import tech_skill_amounts, top_skills

alt.data_transformers.disable_max_rows()
# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_user_info(user: Dict[str, Any]):
    cols = st.columns(3)
    for idx, (key, label) in enumerate(
        [("id", "ID"), ("login", "Login"), ("firstName", "First Name"), ("lastName", "Last Name"), ("email", "Email"), ("campus", "Campus")]
    ):
        cols[idx % 3].markdown(f"**{label}:** {user.get(key, 'N/A')}")


def render_projects(items: List[Dict[str, Any]], empty_text: str, show_xp: bool = False):
    if not items:
        st.info(empty_text)
        return
    df = pd.DataFrame(items)
    columns = ["name", "display", "occurred_at"] if show_xp else ["name"]
    st.dataframe(
        df[[c for c in columns if c in df.columns]].rename(columns={"name": "Project", "display": "XP", "occurred_at": "Date"}),
        hide_index=True,
        use_container_width=True,
    )


def render_xp(xp: Dict[str, Any]):
    display = xp["display"]
    progress = xp["progress"]
    st.metric("XP", f"{display['value']} {display['unit']}")
    st.progress(progress["ratio"])
    st.caption(f"{progress['percent']}% of {progress['goal']} XP")


def render_audit(audit: Dict[str, Any]):
    bars = audit["bars"]
    st.caption(f"Done is totalUp, Received is totalDown, ratio is {audit['ratio_text']}")
    for key, label in [("done", "Done"), ("received", "Received")]:
        st.markdown(f"{label}: **{bars[key]['display']} {bars[key]['unit']}**")
        st.progress(bars[key]["share"])
    st.markdown(f"**Ratio: {audit['ratio_text']}**")


def render_skills(transactions, config: EngineConfig):
    skills = top_skills(transactions, config)
    if not skills:
        st.info("No skills data available.")
        return
    geometry = radar_geometry(skills, layout=config.radar)
    cols = st.columns([3, 1])
    with cols[0]:
        st.altair_chart(radar_chart(geometry), use_container_width=False)
    with cols[1]:
        for skill in skills:
            st.markdown(f"**{skill.label}**: {skill.amount}")


def render_tech_skills(transactions, config: EngineConfig):
    geometry = bar_geometry(tech_skill_amounts(transactions, config), layout=config.bars)
    if not geometry.bars:
        st.info("No tech skills available.")
        return
    st.altair_chart(bar_chart(geometry), use_container_width=False)


# ---------- UI setup ----------
st.set_page_config(page_title="Learner Progress Dashboard", layout="wide")
inject_base_styles()

with st.sidebar:
    st.markdown("### Data")
    files = get_source_files()
    options = [str(f) for f in files]
    chosen: Optional[str] = st.selectbox("Export file", options=options) if options else None
    uploaded_path = st.text_input("…or path to an export JSON", "")
    st.markdown("---")
    with st.expander("Advanced settings", expanded=False):
        root_path = st.text_input("Root path", EngineConfig().root_path)
        top_n = st.slider("Top N skills", min_value=1, max_value=12, value=6)
        dedup_policy = st.selectbox("Skill dedup policy", ["first", "max"], index=0)
        filter_xp_by_root = st.checkbox("Only count XP under root path", value=True)

source = uploaded_path.strip() or chosen
if not source:
    st.error("No export found. Place a profile*.json export next to app.py or enter a path.")
    st.stop()

config = normalize_config(
    {
        "root_path": root_path,
        "top_n": top_n,
        "dedup_policy": dedup_policy,
        "filter_xp_by_root": filter_xp_by_root,
    }
)
data_ctx = load_dashboard_data(Path(source))
ctx = prepare_context(config, data_ctx)
payload = compute_profile(config, ctx, include_charts=False)

user = payload["user"]
st.title(f"Welcome, {user.get('login') if user.get('login') != 'N/A' else 'User'}!")
st.caption("Here's your profile overview")

with card("User Basic Info"):
    render_user_info(user)

cols = st.columns(2)
with cols[0]:
    with card("Pending / Upcoming Projects"):
        render_projects(payload["pending_projects"], "No pending projects found.")
with cols[1]:
    with card("Last Projects & Transactions"):
        render_projects(payload["recent_projects"], "No recent transactions.", show_xp=True)

cols = st.columns(2)
with cols[0]:
    with card("XP"):
        render_xp(payload["xp"])
with cols[1]:
    with card("Audit Ratio"):
        render_audit(payload["audit"])

with card("Skills Radar"):
    render_skills(ctx["skill_transactions"], config)

with card("Tech Skills Bar Chart"):
    render_tech_skills(ctx["skill_transactions"], config)

if any(payload["dropped"].values()):
    st.caption(f"Skipped malformed records: {payload['dropped']}")
