"""Canned MSA API responses used across the tests."""

VERSION_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<RESPONSE VERSION="L100">
  <OBJECT basetype="versions" name="controller-a-versions" oid="1">
    <PROPERTY name="bundle-version">IN210P002</PROPERTY>
    <PROPERTY name="bundle-base-version">IN210P002</PROPERTY>
    <PROPERTY name="sc-fw">IN210P002-01</PROPERTY>
    <PROPERTY name="mc-fw">IN210P002-02</PROPERTY>
    <PROPERTY name="pld-rev">2</PROPERTY>
  </OBJECT>
  <OBJECT basetype="versions" name="controller-b-versions" oid="2">
    <PROPERTY name="bundle-version">IN210P002</PROPERTY>
    <PROPERTY name="sc-fw">IN210P002-01</PROPERTY>
  </OBJECT>
  <OBJECT basetype="status" name="status" oid="3">
    <PROPERTY name="response-type">Success</PROPERTY>
  </OBJECT>
</RESPONSE>
"""

DISKS_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<RESPONSE>
  <OBJECT basetype="drives" name="drive" oid="1">
    <PROPERTY name="location">1.1</PROPERTY>
    <PROPERTY name="serial-number">SN-HDD-1</PROPERTY>
    <PROPERTY name="architecture">HDD</PROPERTY>
    <PROPERTY name="temperature-numeric">45</PROPERTY>
    <PROPERTY name="ssd-life-left-numeric">N/A</PROPERTY>
    <PROPERTY name="health-numeric">0</PROPERTY>
    <PROPERTY name="avg-rsp-time">garbage</PROPERTY>
  </OBJECT>
  <OBJECT basetype="drives" name="drive" oid="2">
    <PROPERTY name="location">1.2</PROPERTY>
    <PROPERTY name="serial-number">SN-SSD-2</PROPERTY>
    <PROPERTY name="architecture">SSD</PROPERTY>
    <PROPERTY name="temperature-numeric">N/A</PROPERTY>
    <PROPERTY name="ssd-life-left-numeric">97</PROPERTY>
    <PROPERTY name="health-numeric">0</PROPERTY>
    <PROPERTY name="avg-rsp-time">1250</PROPERTY>
  </OBJECT>
</RESPONSE>
"""

HDD_ONLY_XML = b"""<RESPONSE>
  <OBJECT name="drive">
    <PROPERTY name="location">1.1</PROPERTY>
    <PROPERTY name="serial-number">SN-HDD-1</PROPERTY>
    <PROPERTY name="architecture">HDD</PROPERTY>
    <PROPERTY name="ssd-life-left-numeric">N/A</PROPERTY>
  </OBJECT>
  <OBJECT name="drive">
    <PROPERTY name="location">1.3</PROPERTY>
    <PROPERTY name="serial-number">SN-HDD-3</PROPERTY>
    <PROPERTY name="architecture">HDD</PROPERTY>
    <PROPERTY name="ssd-life-left-numeric">100</PROPERTY>
  </OBJECT>
</RESPONSE>
"""

DISK_STATISTICS_XML = b"""<RESPONSE>
  <OBJECT name="disk-statistics">
    <PROPERTY name="location">1.1</PROPERTY>
    <PROPERTY name="serial-number">SN-HDD-1</PROPERTY>
    <PROPERTY name="iops">120</PROPERTY>
    <PROPERTY name="smart-count-1">3</PROPERTY>
    <PROPERTY name="smart-count-2">5</PROPERTY>
  </OBJECT>
</RESPONSE>
"""

POOL_STATISTICS_XML = b"""<RESPONSE>
  <OBJECT name="pool-statistics">
    <PROPERTY name="pool">A</PROPERTY>
    <PROPERTY name="serial-number">POOL-SN-A</PROPERTY>
    <OBJECT name="resettable-statistics">
      <PROPERTY name="data-read-numeric">1024</PROPERTY>
    </OBJECT>
    <OBJECT name="tier-statistics">
      <PROPERTY name="tier">Performance</PROPERTY>
      <PROPERTY name="pool">A</PROPERTY>
      <PROPERTY name="serial-number">POOL-SN-A</PROPERTY>
      <OBJECT name="resettable-statistics">
        <PROPERTY name="number-of-reads">77</PROPERTY>
      </OBJECT>
    </OBJECT>
  </OBJECT>
</RESPONSE>
"""

SYSTEM_XML = b"""<RESPONSE>
  <OBJECT name="system-information">
    <PROPERTY name="system-name">msa-lab</PROPERTY>
    <PROPERTY name="health-numeric">0</PROPERTY>
  </OBJECT>
</RESPONSE>
"""
