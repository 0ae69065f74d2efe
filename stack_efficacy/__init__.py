"""Stack Efficacy - screens daily interventions against wearable biometrics."""

__version__ = "0.1.0"
