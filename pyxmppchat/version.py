# pylint: disable=C0111,C0103
version = '1.0.0'
