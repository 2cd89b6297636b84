"""
Rental Wheels backend.

A FastAPI service exposing users, car listings and bookings stored in
MongoDB, with Firebase ID tokens guarding the mutating routes.
"""
