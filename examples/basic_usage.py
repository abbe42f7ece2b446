"""
Basic usage example for ClinDCA package.

This example demonstrates decision curve analysis for a binary outcome and
for a time-to-event outcome with competing risks, using synthetic data.
"""

import numpy as np
import pandas as pd

from clindca import DecisionCurvePipeline, DCAConfig, SurvivalRegime


def create_sample_data(n_samples: int = 750, seed: int = 42):
    """Create a synthetic cohort with risk scores and follow-up times."""
    rng = np.random.default_rng(seed)

    age = rng.normal(60, 8, n_samples)
    marker = rng.gamma(2.0, 0.5, n_samples)
    famhistory = rng.binomial(1, 0.15, n_samples)

    # True risk from a logistic model
    linear = -8 + 0.08 * age + 0.9 * marker + 0.8 * famhistory
    risk = 1 / (1 + np.exp(-linear))
    cancer = rng.binomial(1, risk)

    # Follow-up: cancer (1) competes with death from other causes (2)
    time_cancer = rng.exponential(3.0 / (risk + 0.05))
    time_death = rng.exponential(12.0, n_samples)
    time_censor = rng.uniform(1.0, 6.0, n_samples)
    time = np.minimum.reduce([time_cancer, time_death, time_censor])
    event = np.select([time == time_cancer, time == time_death], [1, 2], default=0)

    return pd.DataFrame({
        'age': age,
        'marker': marker,
        'famhistory': famhistory,
        'risk_model': risk,
        'cancer': cancer,
        'time': time,
        'event': event,
    })


def main():
    """Run the basic ClinDCA examples."""
    print("ClinDCA Basic Usage Example")
    print("=" * 40)

    data = create_sample_data()
    print(f"Data shape: {data.shape}")
    print(f"Outcome distribution: {data['cancer'].value_counts().to_dict()}")

    # Binary outcome
    config = DCAConfig(
        score_kinds={'famhistory': 'binary-indicator', 'marker': 'raw-score-to-rescale'},
        harm={'marker': 0.0025},
        smoothing=True,
        verbose=True,
    )
    pipeline = DecisionCurvePipeline(config)
    result = pipeline.run(data, outcome='cancer', predictors=['risk_model', 'marker', 'famhistory'])

    print("\nNet benefit at selected thresholds:")
    print(result.wide('net_benefit').loc[[0.05, 0.1, 0.2, 0.3]].round(4))
    print("\nNet interventions avoided per 100 patients at 10-30%:")
    nia = result.net_interventions_avoided(nper=100)
    print(nia[nia['threshold'].isin([0.1, 0.2, 0.3])].round(2).to_string(index=False))
    print()
    print(pipeline.summary())

    # Time-to-event outcome with competing risks, evaluated at 2 years
    survival = DecisionCurvePipeline(thresholds=[0.05, 0.1, 0.15, 0.2, 0.25, 0.3])
    surv_result = survival.run(
        data,
        outcome='event',
        predictors=['risk_model'],
        regime=SurvivalRegime(time_horizon=2.0, competing=True),
        time='time',
    )
    print("\nCompeting-risks net benefit at 2 years:")
    print(surv_result.wide('net_benefit').round(4))
    low = surv_result.table['low_confidence'].sum()
    if low:
        print(f"{low} estimates were carried forward beyond observed follow-up")


if __name__ == "__main__":
    main()
