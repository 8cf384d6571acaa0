"""
Hybrid Energy Cost Dashboard

A Streamlit app comparing charging and refuelling costs for a plug-in hybrid.

Run with:
    streamlit run hybrid_cost_app.py
"""

import logging
import math

import matplotlib.pyplot as plt
import streamlit as st

from hybrid_cost_calc import (
    ANNUAL_DISTANCE_KM,
    CURRENCY,
    DEFAULTS,
    DECISION_EPSILON,
    RateInput,
    SpendDistanceInput,
    build_sensitivity_matrix,
    classify_decision,
    compute_costs,
    cost_sweep_frame,
    create_cost_ratio_plot,
    create_cost_vs_price_plot,
    create_critical_price_plot,
    create_scenario_bar_chart,
    create_sensitivity_heatmap,
    diff_tone,
    generate_csv_summary,
    iter_cost_ratio,
    iter_cost_vs_electric_price,
    iter_critical_vs_fuel_price,
    iter_scenario_bars,
    scenario_frame,
    sensitivity_frame,
    sweep_frame,
    validate_inputs,
)

logger = logging.getLogger(__name__)

MODE_SPEND = "Spend & distance"
MODE_RATE = "Consumption rate"


# ============================================================================
# INPUT HELPERS
# ============================================================================

def coerce_non_negative(value) -> float:
    """Coerce raw widget input to a finite, non-negative float (0 otherwise)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def build_energy_input(mode: str, spend: float, distance: float,
                       unit_price: float, rate_per_100: float):
    """Turn sidebar values into the matching engine input record."""
    if mode == MODE_SPEND:
        return SpendDistanceInput(
            spend=coerce_non_negative(spend),
            distance=coerce_non_negative(distance),
            unit_price=coerce_non_negative(unit_price),
        )
    return RateInput(
        unit_price=coerce_non_negative(unit_price),
        rate_per_100=coerce_non_negative(rate_per_100),
    )


def price_help(mode: str, source: str) -> str:
    """Sidebar help for a price field; only spend mode derives consumption from it."""
    if source == "electric":
        use = "the critical price" if mode == MODE_SPEND else "the cost per km"
    else:
        use = "the fuel price sweep" if mode == MODE_SPEND else "the cost per km"
    if mode == MODE_SPEND:
        return f"Used for the consumption estimate and {use}"
    return f"Used for {use}"


def format_money(value: float) -> str:
    return f"{CURRENCY}{value:,.0f}"


@st.cache_data(show_spinner=False)
def derive_dashboard(mode: str,
                     electric_spend: float, electric_distance: float,
                     electric_price: float, electric_rate: float,
                     fuel_spend: float, fuel_distance: float,
                     fuel_price: float, fuel_rate: float) -> dict:
    """Run the whole engine for one input snapshot (memoised on the raw values)."""
    logger.debug("Recomputing dashboard for mode=%s", mode)
    electric = build_energy_input(mode, electric_spend, electric_distance,
                                  electric_price, electric_rate)
    fuel = build_energy_input(mode, fuel_spend, fuel_distance, fuel_price, fuel_rate)

    costs = compute_costs(electric, fuel)
    return {
        'electric': electric,
        'fuel': fuel,
        'warnings': validate_inputs(electric, fuel),
        'costs': costs,
        'decision': classify_decision(costs),
        'cost_sweep': list(iter_cost_vs_electric_price(costs)),
        'critical_sweep': list(iter_critical_vs_fuel_price(costs)),
        'scenarios': list(iter_scenario_bars(costs)),
        'ratio_sweep': list(iter_cost_ratio(costs)),
        'matrix': build_sensitivity_matrix(costs),
    }


# ============================================================================
# MAIN STREAMLIT APP
# ============================================================================

def main():
    """Main function to run the Streamlit app."""

    st.set_page_config(
        page_title="Hybrid Energy Cost Dashboard",
        page_icon="🚗",
        layout="wide"
    )

    st.title("🚗 Hybrid Energy Cost Dashboard")
    st.markdown(
        "Compares what it costs to **charge** or **refuel** your plug-in hybrid, "
        "based on what you actually spent."
    )

    st.sidebar.header("📝 Your Inputs")

    mode = st.sidebar.radio(
        "Input Mode",
        options=[MODE_SPEND, MODE_RATE],
        help="Enter money spent and km driven, or the car's consumption per 100 km"
    )

    # ========================================================================
    # SECTION A: Charging
    # ========================================================================
    st.sidebar.subheader("⚡ A. Charging")

    electric_spend = DEFAULTS['electric_spend']
    electric_distance = DEFAULTS['electric_distance']
    electric_rate = DEFAULTS['electric_rate_per_100']

    if mode == MODE_SPEND:
        electric_spend = st.sidebar.number_input(
            f"Spent on Charging ({CURRENCY})",
            min_value=0.0, value=DEFAULTS['electric_spend'], step=1.0
        )
        electric_distance = st.sidebar.number_input(
            "Distance Driven (km)",
            min_value=0.0, value=DEFAULTS['electric_distance'], step=1.0,
            key="electric_distance"
        )
    else:
        electric_rate = st.sidebar.number_input(
            "Electric Consumption (kWh/100 km)",
            min_value=0.0, value=DEFAULTS['electric_rate_per_100'], step=0.5
        )
    electric_price = st.sidebar.number_input(
        f"Electricity Price ({CURRENCY}/kWh)",
        min_value=0.0, value=DEFAULTS['electric_price'], step=0.1,
        help=price_help(mode, "electric")
    )

    # ========================================================================
    # SECTION B: Refuelling
    # ========================================================================
    st.sidebar.subheader("⛽ B. Refuelling")

    fuel_spend = DEFAULTS['fuel_spend']
    fuel_distance = DEFAULTS['fuel_distance']
    fuel_rate = DEFAULTS['fuel_rate_per_100']

    if mode == MODE_SPEND:
        fuel_spend = st.sidebar.number_input(
            f"Spent on Fuel ({CURRENCY})",
            min_value=0.0, value=DEFAULTS['fuel_spend'], step=1.0
        )
        fuel_distance = st.sidebar.number_input(
            "Distance Driven (km)",
            min_value=0.0, value=DEFAULTS['fuel_distance'], step=1.0,
            key="fuel_distance"
        )
    else:
        fuel_rate = st.sidebar.number_input(
            "Fuel Consumption (L/100 km)",
            min_value=0.0, value=DEFAULTS['fuel_rate_per_100'], step=0.1
        )
    fuel_price = st.sidebar.number_input(
        f"Fuel Price ({CURRENCY}/L)",
        min_value=0.0, value=DEFAULTS['fuel_price'], step=0.1,
        help=price_help(mode, "fuel")
    )

    # ========================================================================
    # PERFORM CALCULATIONS
    # ========================================================================
    try:
        results = derive_dashboard(
            mode,
            electric_spend, electric_distance, electric_price, electric_rate,
            fuel_spend, fuel_distance, fuel_price, fuel_rate,
        )
        costs = results['costs']
        decision = results['decision']
        matrix = results['matrix']

        if results['warnings']:
            st.sidebar.warning("⚠️ Input Warnings:")
            for w in results['warnings']:
                st.sidebar.warning(f"• {w}")

        # ====================================================================
        # DISPLAY: PER-SOURCE BREAKDOWN
        # ====================================================================
        st.header("📈 Calculated Costs")
        col1, col2 = st.columns(2)
        with col1:
            st.subheader("⚡ Charging")
            st.write(f"Cost per km: **{costs.electric_cost_per_km:.4f} {CURRENCY}**")
            st.write(f"Cost per 100 km: **{costs.electric_cost_per_100km:.2f} {CURRENCY}**")
            st.write(f"Consumption: **{costs.electric_rate_per_100:.2f} kWh/100 km**")
        with col2:
            st.subheader("⛽ Refuelling")
            st.write(f"Cost per km: **{costs.fuel_cost_per_km:.4f} {CURRENCY}**")
            st.write(f"Cost per 100 km: **{costs.fuel_cost_per_100km:.2f} {CURRENCY}**")
            st.write(f"Consumption: **{costs.fuel_rate_per_100:.2f} L/100 km**")

        # ====================================================================
        # DISPLAY: KEY METRICS
        # ====================================================================
        tone = diff_tone(costs.diff)
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Charging Cost", f"{costs.electric_cost_per_km:.4f}",
                      help=f"{CURRENCY}/km")
        with col2:
            st.metric("Refuelling Cost", f"{costs.fuel_cost_per_km:.4f}",
                      help=f"{CURRENCY}/km")
        with col3:
            st.metric(
                "Cost Difference",
                f"{costs.diff:+.4f}",
                delta=None if tone == 'neutral' else f"{costs.diff:+.4f}",
                delta_color="inverse",
                help=f"{CURRENCY}/km, positive means charging costs more"
            )
        with col4:
            st.metric(
                "Critical Electricity Price",
                f"{costs.critical_electric_price:.2f}",
                help=f"{CURRENCY}/kWh; above this price refuelling is cheaper"
            )

        # ====================================================================
        # DISPLAY: DECISION
        # ====================================================================
        st.header("🎯 Recommendation")
        message = getattr(st, decision.severity)
        message(f"**{decision.title}**")
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Saving per km", f"{decision.saving_per_km:.4f} {CURRENCY}")
        with col2:
            st.metric(
                f"Annual Saving ({ANNUAL_DISTANCE_KM:,} km)",
                format_money(decision.annual_saving)
            )
        with col3:
            st.markdown("**Electricity break-even**")
            st.write(decision.guidance)

        # ====================================================================
        # CHARTS
        # ====================================================================
        st.header("📊 Price Analysis")
        col1, col2 = st.columns(2)
        with col1:
            st.subheader("Effect of Electricity Price on Cost")
            fig1 = create_cost_vs_price_plot(results['cost_sweep'], electric_price)
            st.pyplot(fig1)
            plt.close(fig1)
        with col2:
            st.subheader("Critical Price as Fuel Price Changes")
            fig2 = create_critical_price_plot(results['critical_sweep'])
            st.pyplot(fig2)
            plt.close(fig2)

        col1, col2 = st.columns(2)
        with col1:
            st.subheader(f"Annual Cost by Scenario ({ANNUAL_DISTANCE_KM:,} km)")
            fig3 = create_scenario_bar_chart(results['scenarios'])
            st.pyplot(fig3)
            plt.close(fig3)
        with col2:
            st.subheader("Cost Ratio Trend")
            fig4 = create_cost_ratio_plot(results['ratio_sweep'])
            st.pyplot(fig4)
            plt.close(fig4)

        # ====================================================================
        # SENSITIVITY MATRIX
        # ====================================================================
        st.header("📋 Sensitivity Matrix")
        st.caption(
            f"Centred on current prices | Charging: "
            f"{matrix.current_electric_cost_per_km:.4f} {CURRENCY}/km | "
            f"Refuelling: {matrix.current_fuel_cost_per_km:.4f} {CURRENCY}/km"
        )
        fig5 = create_sensitivity_heatmap(matrix)
        st.pyplot(fig5)
        plt.close(fig5)
        df_matrix = sensitivity_frame(matrix)
        st.dataframe(df_matrix, use_container_width=True)
        st.info(
            "⚡ charging cheaper · ⛽ refuelling cheaper · "
            "⚖️ difference under 1% · ★ current prices"
        )

        # ====================================================================
        # EXPLANATION AND FORMULAS
        # ====================================================================
        with st.expander("View Formulas and Assumptions", expanded=False):
            st.markdown(f"""
### Calculation Steps

**Step 1 – Cost per km**

`Cost per km = Spend / Distance` (spend & distance mode)

`Cost per km = Unit Price × Consumption per 100 km / 100` (consumption mode)

**Step 2 – Implied consumption**

`Consumption per 100 km = Cost per km × 100 / Unit Price`

**Step 3 – Critical electricity price**

`Critical Price = Fuel Cost per km × 100 / Electric Consumption per 100 km`

**Step 4 – Recommendation**

Differences within ±{DECISION_EPSILON} {CURRENCY}/km count as even.
`Annual Saving = |Difference| × {ANNUAL_DISTANCE_KM:,} km`

### Key Assumptions

1. Consumption per 100 km stays fixed while prices move
2. Every quotient with a zero denominator is shown as 0
3. Sensitivity cells within 1% of each other count as even
""")

        # ====================================================================
        # CSV EXPORT
        # ====================================================================
        st.header("💾 Export Results")
        inputs_dict = {
            'Input Mode': mode,
            f'Electricity Price ({CURRENCY}/kWh)': electric_price,
            f'Fuel Price ({CURRENCY}/L)': fuel_price,
        }
        if mode == MODE_SPEND:
            inputs_dict.update({
                f'Charging Spend ({CURRENCY})': electric_spend,
                'Charging Distance (km)': electric_distance,
                f'Fuel Spend ({CURRENCY})': fuel_spend,
                'Fuel Distance (km)': fuel_distance,
            })
        else:
            inputs_dict.update({
                'Electric Consumption (kWh/100 km)': electric_rate,
                'Fuel Consumption (L/100 km)': fuel_rate,
            })
        col1, col2, col3 = st.columns(3)
        with col1:
            st.download_button(
                label="📥 Download Summary (CSV)",
                data=generate_csv_summary(inputs_dict, costs, decision),
                file_name="hybrid_cost_summary.csv",
                mime="text/csv"
            )
        with col2:
            sweeps = cost_sweep_frame(results['cost_sweep']).merge(
                sweep_frame(results['ratio_sweep'], 'Electricity price', 'Cost ratio'),
                on='Electricity price'
            )
            st.download_button(
                label="📥 Download Price Sweeps (CSV)",
                data=sweeps.to_csv(index=False).encode("utf-8"),
                file_name="hybrid_cost_sweeps.csv",
                mime="text/csv"
            )
        with col3:
            st.download_button(
                label="📥 Download Sensitivity Matrix (CSV)",
                data=df_matrix.to_csv().encode("utf-8"),
                file_name="hybrid_cost_sensitivity.csv",
                mime="text/csv"
            )
        with st.expander("Scenario & critical price tables", expanded=False):
            st.table(scenario_frame(results['scenarios']))
            st.dataframe(
                sweep_frame(results['critical_sweep'], 'Fuel price', 'Critical electricity price'),
                use_container_width=True
            )

    except Exception as e:
        logger.exception("Dashboard calculation failed")
        st.error(f"""
        ❌ **Calculation Error**

        An error occurred: `{str(e)}`

        Please check your input values and try again.
        """)
        st.exception(e)

    # ========================================================================
    # FOOTER
    # ========================================================================
    st.markdown("---")
    st.markdown(
        "<div style='text-align:center;color:#666;'>"
        "<p><strong>Hybrid Energy Cost Dashboard</strong></p>"
        f"<p>Defaults: charging {DEFAULTS['electric_spend']:.0f} {CURRENCY} for "
        f"{DEFAULTS['electric_distance']:.0f} km, refuelling {DEFAULTS['fuel_spend']:.0f} "
        f"{CURRENCY} for {DEFAULTS['fuel_distance']:.0f} km</p>"
        "<p><em>Estimates only, based on the figures you enter.</em></p>"
        "</div>",
        unsafe_allow_html=True
    )


# ============================================================================
# RUN THE APP
# ============================================================================

if __name__ == "__main__":
    main()
