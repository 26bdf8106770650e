#
# azshortcuts/auth.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Auth files and credential generation.

Two auth file formats are accepted.

XML:
  <azureAuth>
    <subscriptions>
      <subscription id="..." tenant="..." client="..." key="..."
                    managementURI="..." baseURL="..." authURL="..."/>
    </subscriptions>
  </azureAuth>

java.util.Properties (key=value, # or ! comments, backslash escapes
and continuation lines):
  id=...
  tenant=...
  client=...
  key=...
  managementURI=...
  baseURL=...
  authURL=...

Token acquisition itself is azure.identity's job.
'''
import logging
import string
import urllib.parse

import azure.identity
from defusedxml import ElementTree

from azshortcuts.base_defaults import (AUTH_URL_DEFAULT,
                                       BASE_URL_DEFAULT,
                                       MANAGEMENT_URI_DEFAULT,
                                      )
from azshortcuts.exceptions import AuthFileError
from azshortcuts.util import (getframe,
                              uuid_normalize,
                             )

class AuthSettings():
    '''
    Values read from an auth file
    '''
    def __init__(self,
                 subscription_id=None,
                 tenant_id=None,
                 client_id=None,
                 client_key=None,
                 management_uri=None,
                 base_url=None,
                 auth_url=None):
        self.subscription_id = subscription_id
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_key = client_key
        self.management_uri = management_uri or MANAGEMENT_URI_DEFAULT
        self.base_url = base_url or BASE_URL_DEFAULT
        self.auth_url = auth_url or AUTH_URL_DEFAULT

    def __repr__(self):
        # Never include client_key
        return "%s(subscription_id=%r, tenant_id=%r, client_id=%r, base_url=%r)" % (type(self).__name__, self.subscription_id, self.tenant_id, self.client_id, self.base_url)

    # Auth-file key -> attribute
    KEYMAP = {'id' : 'subscription_id',
              'tenant' : 'tenant_id',
              'client' : 'client_id',
              'key' : 'client_key',
              'managementURI' : 'management_uri',
              'baseURL' : 'base_url',
              'authURL' : 'auth_url',
             }

    @classmethod
    def from_mapping(cls, mapping):
        '''
        Build from a dict keyed by auth-file keys.
        Empty values are treated as missing.
        '''
        kwargs = {attr : (mapping.get(key, None) or None) for key, attr in cls.KEYMAP.items()}
        return cls(**kwargs)

    @property
    def authority(self):
        '''
        Host part of auth_url as azure.identity wants it (eg login.windows.net)
        '''
        return urllib.parse.urlparse(self.auth_url).hostname or self.auth_url

def _settings_from_xml(text, subscription_id, filename):
    '''
    Parse the XML form. Without subscription_id, use the first subscription.
    '''
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as exc:
        raise AuthFileError("cannot parse auth XML: %s" % exc, filename=filename) from exc
    subs = [x for x in root.iter() if x.tag.split('}')[-1] == 'subscription']
    if not subs:
        raise AuthFileError("No subscriptions found.", filename=filename)
    if not subscription_id:
        return AuthSettings.from_mapping(subs[0].attrib)
    want = subscription_id.lower()
    for sub in subs:
        if (sub.attrib.get('id', '') or '').lower() == want:
            return AuthSettings.from_mapping(sub.attrib)
    raise AuthFileError("Subscription not found: %s" % subscription_id, filename=filename)

_PROPERTIES_WHITESPACE = ' \t\f'
_PROPERTIES_ESCAPES = {'t' : '\t',
                       'n' : '\n',
                       'r' : '\r',
                       'f' : '\f',
                      }

def _properties_lines(text):
    '''
    Generate logical lines of a java.util.Properties file.
    Blank lines and # or ! comments are dropped. A line ending
    in an odd number of backslashes continues on the next line,
    whose leading whitespace is discarded.
    '''
    pending = None
    for line in text.splitlines():
        line = line.lstrip(_PROPERTIES_WHITESPACE)
        if pending is None:
            if (not line) or (line[0] in '#!'):
                continue
            pending = ''
        if (len(line) - len(line.rstrip('\\'))) % 2:
            pending += line[:-1]
            continue
        yield pending + line
        pending = None
    if pending:
        yield pending

def _properties_unescape(txt, filename):
    '''
    Resolve backslash escapes in a key or value
    '''
    ret = list()
    idx = 0
    while idx < len(txt):
        ch = txt[idx]
        idx += 1
        if (ch != '\\') or (idx >= len(txt)):
            ret.append(ch)
            continue
        ch = txt[idx]
        idx += 1
        if ch == 'u':
            digits = txt[idx:idx+4]
            if (len(digits) != 4) or any(x not in string.hexdigits for x in digits):
                raise AuthFileError("malformed \\u escape %r in auth properties" % digits, filename=filename)
            ret.append(chr(int(digits, 16)))
            idx += 4
            continue
        ret.append(_PROPERTIES_ESCAPES.get(ch, ch))
    return ''.join(ret)

def _properties_split(line):
    '''
    Split a logical line into raw key and value. The key ends
    at the first unescaped '=', ':', or whitespace.
    '''
    idx = 0
    while idx < len(line):
        ch = line[idx]
        if ch == '\\':
            idx += 2
            continue
        if (ch in '=:') or (ch in _PROPERTIES_WHITESPACE):
            break
        idx += 1
    rest = line[idx:].lstrip(_PROPERTIES_WHITESPACE)
    if rest[:1] in ('=', ':'):
        rest = rest[1:].lstrip(_PROPERTIES_WHITESPACE)
    return line[:idx], rest

def _settings_from_properties(text, subscription_id, filename):
    '''
    Parse the java.util.Properties form. An explicit subscription_id overrides the file.
    '''
    mapping = dict()
    for line in _properties_lines(text):
        key, value = _properties_split(line)
        mapping[_properties_unescape(key, filename)] = _properties_unescape(value, filename)
    settings = AuthSettings.from_mapping(mapping)
    if subscription_id:
        settings.subscription_id = subscription_id
    return settings

def auth_settings_from_text(text, subscription_id=None, filename=None):
    '''
    Parse auth file contents. Text that begins with '<' is XML;
    anything else is properties.
    '''
    if text.lstrip().startswith('<'):
        settings = _settings_from_xml(text.strip(), subscription_id, filename)
    else:
        settings = _settings_from_properties(text, subscription_id, filename)
    if not settings.subscription_id:
        raise AuthFileError("no subscription id", filename=filename)
    settings.subscription_id = uuid_normalize(settings.subscription_id, key='subscription id', exc_value=lambda txt: AuthFileError(txt, filename=filename))
    return settings

def auth_settings_from_file(path, subscription_id=None):
    '''
    Read and parse the auth file at path.
    '''
    try:
        with open(path, 'r') as f:
            text = f.read()
    except OSError as exc:
        raise AuthFileError("cannot read auth file: %s" % exc, filename=path) from exc
    return auth_settings_from_text(text, subscription_id=subscription_id, filename=path)

def credential_generate(settings=None, logger=None):
    '''
    Return a credential for ARM clients.
    With a service principal in settings, that is a ClientSecretCredential.
    Otherwise, chain az login and the managed identity of this host.
    '''
    logger = logger or logging.getLogger('azshortcuts')
    if settings and settings.client_id and settings.client_key:
        if not settings.tenant_id:
            raise AuthFileError("client %r has no tenant" % settings.client_id)
        logger.debug("%s service principal client_id=%r tenant_id=%r authority=%r", getframe(0), settings.client_id, settings.tenant_id, settings.authority)
        return azure.identity.ClientSecretCredential(settings.tenant_id,
                                                     settings.client_id,
                                                     settings.client_key,
                                                     authority=settings.authority)
    credentials = [azure.identity.AzureCliCredential(),
                   azure.identity.ManagedIdentityCredential(),
                  ]
    logger.debug("%s chained credential %s", getframe(0), [type(x).__name__ for x in credentials])
    return azure.identity.ChainedTokenCredential(*credentials)
