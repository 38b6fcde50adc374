"""
Autoscaling utilization-ratio package.

Modules:
- metrics.utilization: request-relative and range-relative ratio calculators
- metrics.types: pod metric records and calculator results
- metrics.quantity: Kubernetes quantity decoding into milli-units
- targets: named metric targets loaded from YAML
- api: REST API surface for ratio evaluation
"""
