"""Endpoint metric collection, scoring and issue detection.

Concrete RPC clients are injected as MetricSource implementations; this
package only schedules requests and interprets their answers.
"""
