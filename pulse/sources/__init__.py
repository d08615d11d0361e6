"""
pulse/sources package marker.
"""
