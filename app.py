# ============================================================================
# app.py - Main Streamlit Application
# ============================================================================
"""
Analysis journal front-end:
- Guided menus for each analysis family
- Parameter forms for engine commands
- Engine calls through the command-line sidecar
- Charts for IRF, FEVD, historical decomposition, forecast and scree results
"""

import logging
from datetime import datetime

import pandas as pd
import streamlit as st

from app_config import ConfigError, JournalConfig, load_config
from chart_figures import build_figures
from command_catalog import NavigateData, command_label
from command_forms import FLAG, NUMBER, SELECT, form_fields, build_params
from journal import AnalysisJournal, ErrorEntry, FormEntry, ResultEntry, SystemEntry, UserChoiceEntry
from result_charts import chart_kind, classify
from sidecar import make_invoke

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================

st.set_page_config(
    page_title="Analysis Journal",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

# ============================================================================
# CONFIGURATION
# ============================================================================

@st.cache_data
def get_config():
    """Load journal.yaml once per process"""
    return load_config()


try:
    config = get_config()
    config_error = None
except ConfigError as e:
    config = JournalConfig()
    config_error = e

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

if config_error is not None:
    st.error(f"Error loading configuration: {config_error}")
    st.stop()

# ============================================================================
# SESSION STATE INITIALIZATION
# ============================================================================

if 'journal' not in st.session_state:
    st.session_state.journal = AnalysisJournal()

if 'dataset_path' not in st.session_state:
    st.session_state.dataset_path = ""

if 'had_data' not in st.session_state:
    st.session_state.had_data = False

if 'show_data_hint' not in st.session_state:
    st.session_state.show_data_hint = False

st.markdown("""
<style>
    .main-header {
        font-size: 2.2rem;
        font-weight: bold;
        color: #1f77b4;
        margin-bottom: 1rem;
    }
    .user-choice {
        text-align: right;
        font-weight: bold;
        color: #ff7f0e;
    }
</style>
""", unsafe_allow_html=True)

# ============================================================================
# ACTIONS
# ============================================================================

def handle_option(choice):
    journal = st.session_state.journal
    has_data = bool(st.session_state.dataset_path)
    command = journal.select(choice, has_data)
    if isinstance(command, NavigateData):
        st.session_state.show_data_hint = True


def handle_run(entry, raw_fields):
    journal = st.session_state.journal
    params = build_params(entry.command, raw_fields, st.session_state.dataset_path)
    with st.spinner(f"Running {command_label(entry.command)}..."):
        journal.run(entry.id, params, make_invoke(config.sidecar))

# ============================================================================
# ENTRY RENDERERS
# ============================================================================

def render_system(entry, active):
    st.markdown(entry.text)
    if not entry.options:
        return
    cols = st.columns(min(len(entry.options), 4))
    for idx, choice in enumerate(entry.options):
        with cols[idx % len(cols)]:
            st.button(
                choice.label,
                key=f"{entry.id}-{idx}",
                help=choice.description,
                disabled=not active,
                on_click=handle_option,
                args=(choice,),
                use_container_width=True
            )


def render_form(entry):
    label = command_label(entry.command)
    st.markdown(f"#### {label}")

    if entry.status == "done":
        st.caption(f"Parameters: {entry.params}" if entry.params else "Finished")
        return

    dataset_path = st.session_state.dataset_path
    if dataset_path:
        st.caption(f"Dataset: {dataset_path}")
    else:
        st.warning("⚠️ No dataset set. Enter a dataset path in the sidebar first.")

    runnable = entry is st.session_state.journal.active_form()
    if not runnable:
        st.caption("A later choice replaced this form.")

    fields = form_fields(entry.command)
    with st.form(key=f"form-{entry.id}"):
        raw_fields = {}
        cols = st.columns(3)
        for idx, form_field in enumerate(fields):
            key = f"{entry.id}-{form_field.name}"
            with cols[idx % 3]:
                if form_field.kind == SELECT:
                    values = [value for value, _ in form_field.options]
                    names = dict(form_field.options)
                    raw_fields[form_field.name] = st.selectbox(
                        form_field.label, values, key=key, format_func=names.get
                    )
                elif form_field.kind == FLAG:
                    checked = st.checkbox(form_field.label, key=key)
                    raw_fields[form_field.name] = "true" if checked else "false"
                else:
                    raw_fields[form_field.name] = st.text_input(
                        form_field.label,
                        key=key,
                        placeholder=form_field.placeholder,
                        help="Number" if form_field.kind == NUMBER else None
                    )
        if not fields:
            st.caption("No options for this command.")

        submitted = st.form_submit_button("Run", type="primary", disabled=not dataset_path or not runnable)

    if submitted:
        handle_run(entry, raw_fields)
        st.rerun()


def render_result(entry):
    st.markdown(f"#### ✓ {command_label(entry.command)}: Result")

    match = classify(entry.command, entry.data)
    kind = chart_kind(entry.command)
    if match is None and kind is not None:
        st.info(f"ℹ️ This result does not have the columns for a {kind.upper()} chart; showing it as a table.")
    if match is not None:
        for idx, fig in enumerate(build_figures(match)):
            st.plotly_chart(fig, use_container_width=True, key=f"{entry.id}-chart-{idx}")

    data = entry.data
    if isinstance(data, list) and data and all(isinstance(row, dict) for row in data):
        with st.expander("📋 Result table", expanded=match is None):
            st.dataframe(pd.DataFrame(data), use_container_width=True)
    else:
        with st.expander("📋 Raw result", expanded=match is None):
            st.json(data)

    saved = st.session_state.journal.results.get(entry.result_id)
    if saved is not None:
        saved_at = datetime.fromtimestamp(saved.timestamp).strftime("%H:%M:%S")
        st.caption(f"Saved as {saved.id} at {saved_at}")


def render_entry(entry, active):
    if isinstance(entry, SystemEntry):
        render_system(entry, active)
    elif isinstance(entry, UserChoiceEntry):
        st.markdown(f'<div class="user-choice">{entry.label}</div>', unsafe_allow_html=True)
    elif isinstance(entry, FormEntry):
        render_form(entry)
    elif isinstance(entry, ResultEntry):
        render_result(entry)
    elif isinstance(entry, ErrorEntry):
        st.error(entry.message)

# ============================================================================
# MAIN
# ============================================================================

def main():
    journal = st.session_state.journal

    with st.sidebar:
        st.header("📊 Data Configuration")
        if st.session_state.show_data_hint:
            st.info("👇 Enter the path of a CSV or Excel dataset to begin.")
        st.session_state.dataset_path = st.text_input(
            "Dataset path",
            value=st.session_state.dataset_path,
            help="Passed to the engine as the data argument of every command"
        ).strip()

        st.markdown("---")
        if st.button("🔄 New Session", use_container_width=True):
            journal.new_session(bool(st.session_state.dataset_path))

        st.markdown("---")
        st.subheader("Output")
        level_icons = {"info": "ℹ️", "success": "✅", "warning": "⚠️", "error": "❌"}
        for line in journal.output.lines[-10:]:
            st.text(f"{level_icons.get(line.level, '')} {line.message}")

        st.subheader("Saved Results")
        st.write(f"**{len(journal.results.results)}** results this session")
        st.write(f"**{len(journal.open_forms())}** unfinished forms")

    # Offer the analysis menu once when a dataset first appears
    has_data = bool(st.session_state.dataset_path)
    if not journal.entries:
        journal.start(has_data)
    elif has_data and not st.session_state.had_data:
        journal.data_loaded()
    if has_data:
        st.session_state.show_data_hint = False
    st.session_state.had_data = has_data

    st.markdown(f'<div class="main-header">{config.title}</div>', unsafe_allow_html=True)

    last_system = None
    for entry in journal.entries:
        if isinstance(entry, SystemEntry):
            last_system = entry

    for entry in journal.entries:
        render_entry(entry, active=entry is last_system)
        st.markdown("---")


if __name__ == "__main__":
    main()
