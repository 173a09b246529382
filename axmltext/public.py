# Public framework attributes of the android package, as listed in
# frameworks/base/core/res/res/values/public.xml.
# Only the attributes used by manifests and common layouts are listed.

resources = {
    'attr': {
        'theme' : 16842752,
        'label' : 16842753,
        'icon' : 16842754,
        'name' : 16842755,
        'manageSpaceActivity' : 16842756,
        'allowClearUserData' : 16842757,
        'permission' : 16842758,
        'readPermission' : 16842759,
        'writePermission' : 16842760,
        'protectionLevel' : 16842761,
        'permissionGroup' : 16842762,
        'sharedUserId' : 16842763,
        'hasCode' : 16842764,
        'persistent' : 16842765,
        'enabled' : 16842766,
        'debuggable' : 16842767,
        'exported' : 16842768,
        'process' : 16842769,
        'taskAffinity' : 16842770,
        'multiprocess' : 16842771,
        'finishOnTaskLaunch' : 16842772,
        'clearTaskOnLaunch' : 16842773,
        'stateNotNeeded' : 16842774,
        'excludeFromRecents' : 16842775,
        'authorities' : 16842776,
        'syncable' : 16842777,
        'initOrder' : 16842778,
        'grantUriPermissions' : 16842779,
        'priority' : 16842780,
        'launchMode' : 16842781,
        'screenOrientation' : 16842782,
        'configChanges' : 16842783,
        'description' : 16842784,
        'targetPackage' : 16842785,
        'handleProfiling' : 16842786,
        'functionalTest' : 16842787,
        'value' : 16842788,
        'resource' : 16842789,
        'mimeType' : 16842790,
        'scheme' : 16842791,
        'host' : 16842792,
        'port' : 16842793,
        'path' : 16842794,
        'pathPrefix' : 16842795,
        'pathPattern' : 16842796,
        'action' : 16842797,
        'data' : 16842798,
        'targetClass' : 16842799,
        'textSize' : 16842901,
        'textColor' : 16842904,
        'gravity' : 16842927,
        'orientation' : 16842948,
        'id' : 16842960,
        'background' : 16842964,
        'padding' : 16842965,
        'visibility' : 16842972,
        'layout_width' : 16842996,
        'layout_height' : 16842997,
        'layout_margin' : 16842998,
        'src' : 16843033,
        'text' : 16843087,
        'hint' : 16843088,
        'layout_weight' : 16843137,
        'targetActivity' : 16843266,
        'minSdkVersion' : 16843276,
        'versionCode' : 16843291,
        'versionName' : 16843292,
        'inputType' : 16843296,
        'reqTouchScreen' : 16843303,
        'reqKeyboardType' : 16843304,
        'windowSoftInputMode' : 16843307,
        'noHistory' : 16843309,
        'anyDensity' : 16843372,
        'targetSdkVersion' : 16843376,
        'maxSdkVersion' : 16843377,
        'testOnly' : 16843378,
        'contentDescription' : 16843379,
        'backupAgent' : 16843391,
        'allowBackup' : 16843392,
        'glEsVersion' : 16843393,
        'smallScreens' : 16843396,
        'normalScreens' : 16843397,
        'largeScreens' : 16843398,
        'resizeable' : 16843405,
        'required' : 16843406,
        'killAfterRestore' : 16843420,
        'installLocation' : 16843447,
        'restoreAnyVersion' : 16843450,
        'logo' : 16843454,
        'xlargeScreens' : 16843455,
        'screenSize' : 16843466,
        'hardwareAccelerated' : 16843475,
        'largeHeap' : 16843610,
        'uiOptions' : 16843672,
        'parentActivityName' : 16843687,
        'isolatedProcess' : 16843689,
        'supportsRtl' : 16843695,
        'banner' : 16843762,
        'isGame' : 16843764,
        'fullBackupOnly' : 16843891,
    }
}

SYSTEM_RESOURCES = {
    "attributes": {
        "forward": {k: v for k, v in resources['attr'].items()},
        "inverse": {v: k for k, v in resources['attr'].items()}
    }
}


def system_attribute_name(res_id: int) -> str:
    """
    Return the name of a framework attribute, or an empty string if
    `res_id` is not a known public attribute.
    """
    return SYSTEM_RESOURCES['attributes']['inverse'].get(res_id, "")
