#
# tests/test_auth.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azshortcuts.auth and azshortcuts.clouds
'''
import azure.identity
import msrestazure.azure_cloud
import pytest

from azshortcuts.auth import (auth_settings_from_file,
                              auth_settings_from_text,
                              credential_generate,
                             )
from azshortcuts.clouds import (cloud_for_endpoint,
                                cloud_get,
                               )
from azshortcuts.exceptions import AuthFileError

SUB1 = '11111111-2222-3333-4444-555555555555'
SUB2 = '66666666-7777-8888-9999-000000000000'
TENANT = 'aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee'

AUTH_XML = f'''<?xml version="1.0"?>
<azureAuth>
  <subscriptions>
    <subscription id="{SUB1}" tenant="{TENANT}" client="client1" key="secret1"
                  managementURI="https://management.core.windows.net/"
                  baseURL="https://management.azure.com/"
                  authURL="https://login.windows.net/"/>
    <subscription id="{SUB2.upper()}" tenant="{TENANT}" client="client2" key="secret2"
                  baseURL="https://management.chinacloudapi.cn/"
                  authURL="https://login.chinacloudapi.cn/"/>
  </subscriptions>
</azureAuth>
'''

AUTH_PROPERTIES = f'''# service principal
id={SUB1}
tenant={TENANT}
client=client1
key=se=cret
baseURL=https://management.azure.com/
'''

AUTH_PROPERTIES_STORED = rf'''#Written by java.util.Properties.store
! service principal in the China cloud
id={SUB2}
tenant : {TENANT}
client client2
key=pa\=ss\\wo\
    rd\:1
baseURL=https\://management.chinacloudapi.cn/
authURL=https\://login.chinacloudapi.cn/
'''

class TestAuthFile():
    '''
    Test parsing of auth files
    '''
    def test_xml_first(self):
        settings = auth_settings_from_text(AUTH_XML)
        assert settings.subscription_id == SUB1
        assert settings.tenant_id == TENANT
        assert settings.client_id == 'client1'
        assert settings.client_key == 'secret1'
        assert settings.authority == 'login.windows.net'
        assert 'secret1' not in repr(settings)

    def test_xml_selected(self):
        settings = auth_settings_from_text(AUTH_XML, subscription_id=SUB2)
        assert settings.subscription_id == SUB2
        assert settings.client_id == 'client2'
        assert settings.base_url == 'https://management.chinacloudapi.cn/'
        assert settings.management_uri == 'https://management.core.windows.net/'

    def test_xml_not_found(self):
        with pytest.raises(AuthFileError) as exc_info:
            auth_settings_from_text(AUTH_XML, subscription_id='99999999-2222-3333-4444-555555555555', filename='x.azureauth')
        assert 'Subscription not found' in str(exc_info.value)
        assert exc_info.value.filename == 'x.azureauth'

    def test_xml_no_subscriptions(self):
        with pytest.raises(AuthFileError):
            auth_settings_from_text('<azureAuth><subscriptions/></azureAuth>')

    def test_xml_malformed(self):
        with pytest.raises(AuthFileError):
            auth_settings_from_text('<azureAuth><subscriptions>')

    def test_properties(self):
        settings = auth_settings_from_text(AUTH_PROPERTIES)
        assert settings.subscription_id == SUB1
        assert settings.tenant_id == TENANT
        assert settings.client_key == 'se=cret'
        assert settings.auth_url == 'https://login.windows.net/'

    def test_properties_override(self):
        settings = auth_settings_from_text(AUTH_PROPERTIES, subscription_id=SUB2)
        assert settings.subscription_id == SUB2

    def test_properties_java_escapes(self):
        settings = auth_settings_from_text(AUTH_PROPERTIES_STORED)
        assert settings.subscription_id == SUB2
        assert settings.tenant_id == TENANT
        assert settings.client_id == 'client2'
        assert settings.client_key == 'pa=ss\\word:1'
        assert settings.base_url == 'https://management.chinacloudapi.cn/'
        assert settings.authority == 'login.chinacloudapi.cn'
        assert cloud_for_endpoint(settings.base_url) is msrestazure.azure_cloud.AZURE_CHINA_CLOUD

    def test_properties_bad_escape(self):
        with pytest.raises(AuthFileError):
            auth_settings_from_text('id=%s\nclient=x\\u00g1\n' % SUB1)

    def test_properties_no_subscription(self):
        with pytest.raises(AuthFileError):
            auth_settings_from_text('tenant=%s\n' % TENANT)

    def test_file(self, tmp_path):
        path = tmp_path / 'my.azureauth'
        path.write_text(AUTH_XML)
        assert auth_settings_from_file(str(path)).subscription_id == SUB1
        with pytest.raises(AuthFileError):
            auth_settings_from_file(str(tmp_path / 'missing.azureauth'))

    def test_credential(self):
        settings = auth_settings_from_text(AUTH_XML)
        assert isinstance(credential_generate(settings), azure.identity.ClientSecretCredential)
        assert isinstance(credential_generate(), azure.identity.ChainedTokenCredential)

class TestClouds():
    '''
    Test cloud lookup
    '''
    def test_cloud_get(self):
        assert cloud_get('AzureCloud') is msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD
        assert cloud_get('azurecloud') is msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD
        assert cloud_get('AzurePublicCloud') is msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD
        with pytest.raises(ValueError):
            cloud_get('NoSuchCloud')

    def test_cloud_for_endpoint(self):
        assert cloud_for_endpoint('https://management.azure.com/') is msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD
        assert cloud_for_endpoint('https://management.core.windows.net/') is msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD
        assert cloud_for_endpoint('https://management.chinacloudapi.cn/') is msrestazure.azure_cloud.AZURE_CHINA_CLOUD
        with pytest.raises(ValueError):
            cloud_for_endpoint('https://example.com/')
