from __future__ import annotations

from attendance_hub.sessions.pin import PinGenerator


def test_generated_pin_is_six_digits_zero_padded():
    pins = PinGenerator(randbelow=lambda upper: 42)
    assert pins.generate() == "000042"


def test_randbelow_is_asked_for_the_full_range():
    seen = []

    def randbelow(upper):
        seen.append(upper)
        return upper - 1

    assert PinGenerator(randbelow=randbelow).generate() == "999999"
    assert seen == [1_000_000]


def test_default_generator_produces_well_formed_pins():
    pins = PinGenerator()
    for _ in range(200):
        pin = pins.generate()
        assert len(pin) == 6
        assert pin.isdigit()
        assert pins.is_well_formed(pin)


def test_is_well_formed_rejects_other_shapes():
    pins = PinGenerator()
    assert not pins.is_well_formed("12345")
    assert not pins.is_well_formed("1234567")
    assert not pins.is_well_formed("12a456")
    assert not pins.is_well_formed(123456)
