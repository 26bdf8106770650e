#
# azshortcuts/base_defaults.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Default settings that are not loaded from any configuration.
To keep dependencies simple, use only Python built-in types here.
'''
# Auth-file endpoints used when the file does not name them.
AUTH_URL_DEFAULT = 'https://login.windows.net/'
BASE_URL_DEFAULT = 'https://management.azure.com/'
MANAGEMENT_URI_DEFAULT = 'https://management.core.windows.net/'

# Maximum length of a VM computer name (NetBIOS limit)
COMPUTER_NAME_MAX_LEN = 15

CONFIG_FILENAME_DEFAULT = '~/.azshortcuts.yaml'
CONFIG_FILENAME_ENV = 'AZSHORTCUTS_CONFIG'

EXC_VALUE_DEFAULT = ValueError

LOCATION_DEFAULT_FALLBACK = 'westus'

# Seconds between LRO status checks when the service does not say otherwise
LRO_POLL_INTERVAL_DEFAULT = 5

# Network defaults applied at create time
NETWORK_ADDRESS_SPACE_DEFAULT = '10.0.0.0/16'
NETWORK_SUBNET_NAME_DEFAULT = 'subnet1'

# Name suffixes/prefixes for resources created implicitly by another resource
NAME_SUFFIX_GROUP = 'group'
NAME_SUFFIX_NETWORK = 'net'
NAME_SUFFIX_NSG = 'set'
NAME_SUFFIX_NIC = 'nic'
NAME_PREFIX_STORAGE = 'store'
NAME_PREFIX_VHD = 'vhd'

# Classic network configuration: subnet added when none is given
CLASSIC_SUBNET_NAME_DEFAULT = 'Subnet-1'

OS_DISK_NAME_DEFAULT = 'osdisk'

# Prefix for item expansion
PF = '  '

SECURITY_RULE_PRIORITY_DEFAULT = 100

STORAGE_ACCOUNT_KIND_DEFAULT = 'Storage'
