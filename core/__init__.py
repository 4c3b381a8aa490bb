"""Legajos Core Module"""
