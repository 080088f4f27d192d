from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from abanalysis.adapter import (
    AnalysisView,
    UploadOutcome,
    build_manual_view,
    build_uploaded_view,
    default_summaries,
    load_group,
)
from abanalysis.charts import (
    CONTROL_COLOR,
    TEST_COLOR,
    confidence_interval_figure,
    distribution_figure,
    effect_size_figure,
    histogram_figure,
)
from abanalysis.config import configure_logging
from abanalysis.data_loader import export_sample_csv, preview_note, preview_table
from abanalysis.statistics import normalize_summary

configure_logging()

st.set_page_config(page_title="Control vs Test Analysis", layout="wide")

st.title("Control vs Test Analysis")
st.caption("Z-test, Cohen's d, confidence interval and power for two numeric samples.")

if "widget_key" not in st.session_state:
    st.session_state["widget_key"] = 0


def _reset() -> None:
    # new widget keys drop uploaded files and restore default inputs
    st.session_state["widget_key"] += 1
    st.session_state["analyzed"] = False
    for k in ("control_outcome", "test_outcome"):
        st.session_state.pop(k, None)


def _show_upload_outcome(outcome: Optional[UploadOutcome], file_name: str) -> None:
    if outcome is None:
        return
    if not outcome.ok:
        st.error(outcome.error)
        return
    s = normalize_summary(outcome.group.summary)
    st.markdown(f"**{file_name}**")
    st.write(f"Records: {s.size:,} • Mean: {s.mean:.2f} • STD: {s.std:.2f}")


with st.sidebar:
    st.header("Data")
    mode = st.radio("Input", ["Manual input", "Upload CSV files"], index=0)

    key = st.session_state["widget_key"]

    if mode == "Upload CSV files":
        st.info('Each CSV needs a numeric column named "control" or "test" respectively.')
        for group in ("control", "test"):
            uploaded = st.file_uploader(f"{group.title()} group CSV", type=["csv", "txt"], key=f"{group}_file_{key}")
            if uploaded is not None:
                st.session_state[f"{group}_outcome"] = load_group(uploaded, group)
                _show_upload_outcome(st.session_state[f"{group}_outcome"], uploaded.name)
            else:
                st.session_state.pop(f"{group}_outcome", None)

        control_outcome = st.session_state.get("control_outcome")
        test_outcome = st.session_state.get("test_outcome")
        ready = bool(control_outcome and control_outcome.ok and test_outcome and test_outcome.ok)

        if st.button("Analyze data", type="primary", disabled=not ready):
            st.session_state["analyzed"] = True
    else:
        c, t = default_summaries()
        st.subheader("Control group")
        control_mean = st.number_input("Control mean", value=float(c.mean), key=f"control_mean_{key}")
        control_std = st.number_input("Control std", value=float(c.std), key=f"control_std_{key}")
        control_size = st.number_input("Control size", min_value=1, value=int(c.size), step=1, key=f"control_size_{key}")
        st.subheader("Test group")
        test_mean = st.number_input("Test mean", value=float(t.mean), key=f"test_mean_{key}")
        test_std = st.number_input("Test std", value=float(t.std), key=f"test_std_{key}")
        test_size = st.number_input("Test size", min_value=1, value=int(t.size), step=1, key=f"test_size_{key}")

    st.button("Reset", on_click=_reset)


def render_sample_info(view: AnalysisView) -> None:
    st.subheader("Sample information")
    info = pd.DataFrame(
        {
            "group": ["Control", "Test"],
            "size": [f"{view.control.size:,}", f"{view.test.size:,}"],
            "mean": [f"{view.control.mean:.2f}", f"{view.test.mean:.2f}"],
            "std": [f"{view.control.std:.2f}", f"{view.test.std:.2f}"],
            "variance": [f"{view.control.variance:.2f}", f"{view.test.variance:.2f}"],
        }
    )
    st.dataframe(info, use_container_width=True, hide_index=True)


def render_uploaded_data(view: AnalysisView, control_values, test_values) -> None:
    st.subheader("Data preview")
    left, right = st.columns(2)
    for col, name, values in ((left, "control", control_values), (right, "test", test_values)):
        with col:
            st.markdown(f"#### {name.title()}")
            st.dataframe(preview_table(values), use_container_width=True, hide_index=True)
            note = preview_note(values)
            if note:
                st.caption(note)
            st.download_button(
                label=f"Download cleaned {name} data",
                data=export_sample_csv(values, name).encode("utf-8"),
                file_name=f"{name}_clean.csv",
                mime="text/csv",
            )

    st.subheader("Histograms")
    left, right = st.columns(2)
    with left:
        st.plotly_chart(histogram_figure(view.control_histogram, "Control Group Histogram", CONTROL_COLOR),
                        use_container_width=True)
    with right:
        st.plotly_chart(histogram_figure(view.test_histogram, "Test Group Histogram", TEST_COLOR),
                        use_container_width=True)


def render_results(view: AnalysisView) -> None:
    labels = view.labels
    conclusion = view.conclusion

    st.subheader("Z-test results")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("z-score", labels["z_score"])
    c2.metric("p-value", labels["p_value"])
    c3.metric("Cohen's d", labels["cohens_d"], labels["effect_size"])
    c4.metric("Conclusion", conclusion.verdict)

    c5, c6 = st.columns(2)
    c5.metric("Statistical power", labels["power"])
    c6.metric("Type II error", labels["type_ii_error"])

    if view.result.is_significant:
        st.error(f"{conclusion.headline} {conclusion.details}")
    else:
        st.success(f"{conclusion.headline} {conclusion.details}")

    st.markdown(f"**Effect size:** {labels['effect_size']} ({labels['cohens_d']} standard deviations)")
    st.progress(int(view.effect_sizes.marker_position))

    ci = view.result.confidence_interval
    st.write("**95% confidence interval (test mean):**", f"[{ci.lower:.2f}, {ci.upper:.2f}]")

    st.subheader("Charts")
    st.plotly_chart(distribution_figure(view.distribution), use_container_width=True)
    left, right = st.columns(2)
    with left:
        st.plotly_chart(effect_size_figure(view.effect_sizes), use_container_width=True)
    with right:
        fig: go.Figure = confidence_interval_figure(view.ci_plot)
        st.plotly_chart(fig, use_container_width=True)


if mode == "Upload CSV files":
    if st.session_state.get("analyzed"):
        control_outcome = st.session_state.get("control_outcome")
        test_outcome = st.session_state.get("test_outcome")
        if control_outcome and control_outcome.ok and test_outcome and test_outcome.ok:
            view = build_uploaded_view(control_outcome.group, test_outcome.group)
            render_sample_info(view)
            render_uploaded_data(view, control_outcome.group.values, test_outcome.group.values)
            render_results(view)
        else:
            st.warning("Upload valid control and test files, then press Analyze data.")
    else:
        st.info("Upload a control and a test CSV file, then press Analyze data.")
else:
    view = build_manual_view(
        control_mean=control_mean,
        control_std=control_std,
        control_size=int(control_size),
        test_mean=test_mean,
        test_std=test_std,
        test_size=int(test_size),
    )
    render_sample_info(view)
    render_results(view)
