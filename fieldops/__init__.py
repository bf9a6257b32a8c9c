"""Field service operations API"""
