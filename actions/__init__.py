"""Reactive updates driving the throughput curve."""
