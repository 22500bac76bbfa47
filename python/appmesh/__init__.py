"""
appmesh:  Python support for the App Mesh process-management daemon's REST layer.
"""
