"""
kubeswitch Core Package.

Configuration, alias rules, context types and session wiring.
"""
