"""Legajos API"""
