# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

__project__ = 'xmlbind'
__summary__ = 'Declarative conversion between Python dataclasses and XML documents'
__version__ = '0.1.0'

__license__ = 'AGPLv3+'

__author__ = 'Dan Pascu'
__copyright__ = f'Copyright 2020-present {__author__}'
