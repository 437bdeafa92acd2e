"""Core conversion modules for ISOGas.

This package contains the conversion engine and its support:
- units: Unit registry and quantity types
- molecules: Molar mass table (CAS keyed, name lookup as fallback)
- factors: Conversion factor resolution between unit pairs
- correction: Reference-condition (temperature/pressure) correction
- validation: Mixture validation rules
- conversion: Local approximate engine
- mixture: Normalization and balance gas helpers
- state: Remote engine health tracking
- orchestrator: Hybrid remote/local conversion
- config: Settings and mixture input
"""
