"""
Closed value sets shared by instructors, class locations and classes.
"""

from __future__ import annotations

from enum import Enum


class YogaSpeciality(str, Enum):
    HATHA = "Hatha"
    VINYASA = "Vinyasa"
    ASHTANGA = "Ashtanga"
    BIKRAM = "Bikram"
    IYENGAR = "Iyengar"
    KUNDALINI = "Kundalini"
    YIN = "Yin"
    RESTORATIVE = "Restorative"
    POWER_YOGA = "Power Yoga"
    JIVAMUKTI = "Jivamukti"
    ANUSARA = "Anusara"
    SIVANANDA = "Sivananda"
    PRENATAL = "Prenatal"
    AERIAL_YOGA = "Aerial Yoga"
    ACRO_YOGA = "AcroYoga"
    CHAIR_YOGA = "Chair Yoga"
    VINIYOGA = "Viniyoga"
    YOGA_NIDRA = "Yoga Nidra"
    INTEGRAL_YOGA = "Integral Yoga"
    TANTRA_YOGA = "Tantra Yoga"


class ClassLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ClassCategory(str, Enum):
    BALANCE = "Balance"
    FLEXIBILITY = "Flexibility"
    STRENGTH = "Strength"
    HANDSTANDS = "Handstands"
    UPSIDE_DOWN = "Upside Down"
    RELAXATION = "Relaxation"
    CORE = "Core"


class ClassFormat(str, Enum):
    LOCATION = "Location"  # held only at the physical location
    STREAM = "Stream"  # live stream only
    BOTH = "Both"
